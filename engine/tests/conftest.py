import pytest
from unittest.mock import MagicMock
from core.declarations import DeclarationRecord, NestedDeclaration, ParameterRecord, ToggleAnnotation

def _param(name, type_, default=None, has_default=True):
    return ParameterRecord(name=name, type=type_, has_default=has_default, default=default)

def _toggle(name, title, *parameters, package="demo.toggles", nested=(), **annotation):
    return DeclarationRecord(
        name=name,
        package=package,
        annotation=ToggleAnnotation(title=title, **annotation),
        parameters=list(parameters),
        nested=list(nested),
        source=f"{name}.kt",
    )

@pytest.fixture
def mock_logger():
    return MagicMock()

@pytest.fixture
def make_param():
    """Build a constructor parameter record: make_param(name, type, default)."""
    return _param

@pytest.fixture
def make_toggle():
    """Build a declaration record: make_toggle(name, title, *params, package=..., nested=..., **annotation)."""
    return _toggle

@pytest.fixture
def camera_record():
    """AdvancedCameraFeatureToggle{enabled=true, timeout=5000, filterSettings=FilterSettings{minZoom=1, maxZoom=12}}, on by default"""
    return _toggle(
        "AdvancedCameraFeatureToggle",
        "Advanced camera",
        _param("enabled", "Boolean", True),
        _param("timeout", "Long", 5000),
        _param("filterSettings", "FilterSettings"),
        nested=[
            NestedDeclaration(
                name="FilterSettings",
                parameters=[_param("minZoom", "Int", 1), _param("maxZoom", "Int", 12)],
            )
        ],
        key="advancedCamera",
        defaultEnabled=True,
    )

@pytest.fixture
def push_record():
    return _toggle(
        "PushNotificationFeatureToggle",
        "Push notifications",
        _param("enabled", "Boolean", False),
        _param("channel", "String", "default"),
        _param("ratio", "Double", 0.5),
        key="push-notification",
    )
