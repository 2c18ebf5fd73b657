import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock
from api import app
from core.descriptors import DescriptorBuilder
from core.diagnostics import Diagnostic, NamingCollisionError
from core.grpc_stubs import GrpcStubGenerator
from core.pipeline import FeatureToggleGenerator, GenerationResult
from core.syntax import GeneratedFile
from dependencies import get_dependencies

client = TestClient(app)

@pytest.fixture
def mock_deps():
    """Create a mock for dependencies."""
    deps = MagicMock()
    deps.generator = MagicMock()
    deps.grpc_generator = MagicMock()
    deps.descriptor_builder = MagicMock()
    deps.logger = MagicMock()

    return deps

@pytest.fixture(autouse=True)
def override_deps(mock_deps):
    """Override the global dependency with our mock."""
    app.dependency_overrides[get_dependencies] = lambda: mock_deps
    yield
    app.dependency_overrides = {}

def _declaration():
    return {
        "name": "AdvancedCameraFeatureToggle",
        "package": "demo.toggles",
        "annotation": {"title": "Advanced camera", "key": "advancedCamera"},
        "parameters": [
            {"name": "enabled", "type": "Boolean", "hasDefault": True, "default": True},
            {"name": "timeout", "type": "Long", "hasDefault": True, "default": 5000},
        ],
    }

def test_generate_success(mock_deps):
    """Test generating a package from declarations."""
    # Arrange
    mock_deps.generator.generate.return_value = GenerationResult(
        package="demo.toggles",
        files=[GeneratedFile(path="demo/toggles/app_config.py", content="# app config\n")],
        diagnostics=[Diagnostic.warning("careful", "AdvancedCameraFeatureToggle")],
    )

    # Act
    response = client.post("/api/generate", json={"declarations": [_declaration()]})

    # Assert
    assert response.status_code == 200
    data = response.json()
    assert data["package"] == "demo.toggles"
    assert data["files"] == [{"path": "demo/toggles/app_config.py", "content": "# app config\n"}]
    assert data["diagnostics"][0]["severity"] == "warning"
    records = mock_deps.generator.generate.call_args.args[0]
    assert records[0].name == "AdvancedCameraFeatureToggle"
    assert records[0].parameters[0].has_default is True

def test_generate_collision_returns_conflict(mock_deps):
    """Test that a naming collision maps to 409 with its diagnostics."""
    collision = Diagnostic.error("Generated name 'AppConfig' is reserved", "AppFeature")
    mock_deps.generator.generate.side_effect = NamingCollisionError([collision])

    response = client.post("/api/generate", json={"declarations": [_declaration()]})

    assert response.status_code == 409
    detail = response.json()["detail"]
    assert "Naming collisions in batch" in detail["message"]
    assert detail["diagnostics"][0]["declaration"] == "AppFeature"

def test_generate_validation_error():
    """Test Pydantic validation for missing fields."""
    response = client.post("/api/generate", json={})

    assert response.status_code == 422

def test_generate_end_to_end(mock_deps, mock_logger):
    """Test the route with the real generator behind it."""
    mock_deps.generator = FeatureToggleGenerator(mock_logger)

    response = client.post("/api/generate", json={"declarations": [_declaration(), {"name": "Broken", "annotation": {}}]})

    assert response.status_code == 200
    data = response.json()
    paths = [generated["path"] for generated in data["files"]]
    assert "demo/toggles/advanced_camera_config_dto.py" in paths
    assert len(data["diagnostics"]) == 1
    assert data["diagnostics"][0]["declaration"] == "Broken"

def test_generate_grpc(mock_deps, mock_logger):
    mock_deps.grpc_generator = GrpcStubGenerator(mock_logger, default_package="orders.impl")

    response = client.post("/api/generate/grpc", json={"interfaces": [{
        "interfaceName": "OrderGrpc",
        "module": "orders.api",
        "methods": [{"methodName": "GetOrders", "requestType": "orders.messages.EmptyRequest", "responseType": "String"}],
    }]})

    assert response.status_code == 200
    paths = [generated["path"] for generated in response.json()["files"]]
    assert paths == ["orders/impl/grpc_result.py", "orders/impl/order_grpc_impl.py"]

def test_validate_features(mock_deps, mock_logger):
    """Test resolving names without generating."""
    mock_deps.descriptor_builder = DescriptorBuilder(mock_logger)

    response = client.post("/api/features/validate", json={"declarations": [_declaration()]})

    assert response.status_code == 200
    feature = response.json()["features"][0]
    assert feature["dto_name"] == "AdvancedCameraConfigDto"
    assert feature["domain_name"] == "AdvancedCameraConfig"
    assert feature["enum_name"] == "AdvancedCamera"
    assert feature["key"] == "advancedCamera"
    assert feature["fields"] == ["enabled", "timeout"]

def test_unexpected_error_returns_500(mock_deps):
    """Test the global exception handler."""
    mock_deps.generator.generate.side_effect = RuntimeError("disk on fire")
    failing_client = TestClient(app, raise_server_exceptions=False)

    response = failing_client.post("/api/generate", json={"declarations": [_declaration()]})

    assert response.status_code == 500
    assert response.json()["detail"] == "disk on fire"
