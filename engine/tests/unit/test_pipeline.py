import pytest
from core.diagnostics import NamingCollisionError, Severity
from core.pipeline import FeatureToggleGenerator, find_collisions
from core.declarations import NestedDeclaration
from core.descriptors import DescriptorBuilder

@pytest.fixture
def generator(mock_logger):
    return FeatureToggleGenerator(mock_logger, default_package="feature_toggles")

def _paths(result):
    return [generated.path for generated in result.files]

def test_generate_camera_batch(generator, camera_record):
    """Test the full file set of a single-feature batch."""
    result = generator.generate([camera_record])

    assert result.package == "demo.toggles"
    assert result.diagnostics == []
    assert _paths(result) == [
        "demo/toggles/__init__.py",
        "demo/toggles/advanced_camera_config.py",
        "demo/toggles/advanced_camera_config_dto.py",
        "demo/toggles/app_config.py",
        "demo/toggles/app_config_dto.py",
        "demo/toggles/feature_gate.py",
        "demo/toggles/feature_toggle_mappers.py",
        "demo/toggles/feature_toggles.py",
        "demo/toggles/fixtures.py",
        "demo/toggles/is_advanced_camera_config_enabled_use_case.py",
    ]

def test_generated_files_compile(generator, camera_record, push_record):
    result = generator.generate([camera_record, push_record])

    for generated in result.files:
        compile(generated.content, generated.path, "exec")

def test_generation_is_deterministic(mock_logger, camera_record, push_record):
    """Test that identical input renders byte-identical output."""
    first = FeatureToggleGenerator(mock_logger).generate([camera_record, push_record])
    second = FeatureToggleGenerator(mock_logger, workers=4).generate([camera_record, push_record])

    assert first.files == second.files

def test_partial_batch(generator, camera_record, push_record, make_toggle, make_param):
    """Test that one invalid declaration is reported and the rest still generate."""
    invalid = make_toggle("BrokenFeature", "Broken", make_param("limit", "Int", 3))

    result = generator.generate([camera_record, invalid, push_record])

    assert len(result.diagnostics) == 1
    assert result.diagnostics[0].declaration == "BrokenFeature"
    assert result.has_errors
    paths = _paths(result)
    assert "demo/toggles/advanced_camera_config.py" in paths
    assert "demo/toggles/push_notification_config.py" in paths
    assert not any("broken" in path for path in paths)

def test_empty_batch_generates_nothing(generator, make_toggle, make_param):
    result = generator.generate([make_toggle("Broken", "Broken")])

    assert result.package is None
    assert result.files == []
    assert len(result.diagnostics) == 1

def test_enum_and_app_config_cover_every_feature(generator, camera_record, push_record):
    """Test batch composition: one AppConfigDto field per key, in batch order."""
    result = generator.generate([camera_record, push_record])
    files = {generated.path: generated.content for generated in result.files}

    enum_source = files["demo/toggles/feature_toggles.py"]
    assert "    AdvancedCamera = ('advancedCamera', 'Advanced camera', True)" in enum_source
    assert "    PushNotification = ('push-notification', 'Push notifications', False)" in enum_source

    dto_source = files["demo/toggles/app_config_dto.py"]
    camera_line = "    advancedCamera: Optional[AdvancedCameraConfigDto] = Field(default=None, alias='advancedCamera')"
    push_line = "    push_notification: Optional[PushNotificationConfigDto] = Field(default=None, alias='push-notification')"
    assert dto_source.index(camera_line) < dto_source.index(push_line)

def test_mixed_packages_warn_and_use_first(generator, camera_record, push_record):
    result = generator.generate([camera_record, push_record.model_copy(update={"package": "other.toggles"})])

    assert result.package == "demo.toggles"
    assert all(path.startswith("demo/toggles/") for path in _paths(result))
    assert [d.severity for d in result.diagnostics] == [Severity.WARNING]
    assert "other.toggles" in result.diagnostics[0].message

@pytest.mark.parametrize("override", [
    {"dtoName": "AdvancedCameraConfigDto"},
    {"domainName": "AdvancedCameraConfig"},
    {"enumName": "AdvancedCamera"},
    {"key": "advancedCamera"},
])
def test_collisions_fail_the_batch(generator, camera_record, make_toggle, make_param, override):
    """Test that two features resolving to the same name fail the whole batch."""
    other = make_toggle("OtherToggle", "Other", make_param("enabled", "Boolean", True), **override)

    with pytest.raises(NamingCollisionError) as exc_info:
        generator.generate([camera_record, other])

    messages = [d.message for d in exc_info.value.diagnostics]
    assert any("AdvancedCameraFeatureToggle, OtherToggle" in message for message in messages)

def test_reserved_aggregate_names_collide(generator, make_toggle, make_param):
    """Test that a feature named 'App' clashes with AppConfig/AppConfigDto."""
    app = make_toggle("AppFeature", "App", make_param("enabled", "Boolean", True))

    with pytest.raises(NamingCollisionError) as exc_info:
        generator.generate([app])

    assert "Generated name 'AppConfig' is reserved" in str(exc_info.value)

def test_key_collision_after_attribute_mapping(mock_logger, make_toggle, make_param):
    first = make_toggle("AToggle", "A", make_param("enabled", "Boolean", True), key="dark-mode")
    second = make_toggle("BToggle", "B", make_param("enabled", "Boolean", True), key="dark_mode")
    descriptors, _ = DescriptorBuilder(mock_logger).build_all([first, second])

    diagnostics = find_collisions(descriptors)

    assert [d.message for d in diagnostics] == ["AppConfig attribute 'dark_mode' is claimed by AToggle, BToggle"]

def test_collision_is_logged(generator, mock_logger, camera_record):
    with pytest.raises(NamingCollisionError):
        generator.generate([camera_record, camera_record])

    assert mock_logger.log_diagnostic.called

def test_features_sharing_a_nested_class_name_do_not_collide(generator, make_toggle, make_param):
    """Test that nested classes are scoped to their feature."""
    def with_settings(name):
        return make_toggle(
            f"{name}Toggle",
            name,
            make_param("enabled", "Boolean", True),
            make_param("settings", "Settings"),
            nested=[NestedDeclaration(name="Settings", parameters=[make_param("level", "Int", 1)])],
        )

    result = generator.generate([with_settings("Camera"), with_settings("Map")])

    assert not result.has_errors
    files = {generated.path: generated.content for generated in result.files}
    assert "demo/toggles/settings_config.py" not in files
    mappers = files["demo/toggles/feature_toggle_mappers.py"]
    assert "def to_camera_config_settings_config(" in mappers
    assert "def to_map_config_settings_config(" in mappers
