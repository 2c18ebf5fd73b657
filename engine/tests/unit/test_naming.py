import pytest
from core.naming import (
    attribute_name,
    derive_feature_name,
    fixture_name,
    mapper_name,
    resolve_naming,
    snake_case,
    use_case_name,
)

@pytest.mark.parametrize("source_name, expected", [
    ("PushNotificationFeatureToggle", "PushNotification"),
    ("DarkModeFeature", "DarkMode"),
    ("BetaToggle", "Beta"),
    ("Checkout", "Checkout"),
    # FeatureToggle wins over Toggle
    ("SearchFeatureToggle", "Search"),
])
def test_derive_feature_name(source_name, expected):
    """Test that one toggle suffix is stripped, first match wins."""
    assert derive_feature_name(source_name) == expected

def test_derive_feature_name_never_empty():
    """Test that a name made only of a suffix is left unchanged."""
    assert derive_feature_name("Feature") == "Feature"
    assert derive_feature_name("FeatureToggle") == "FeatureToggle"

def test_resolve_naming_defaults():
    """Test the default dto/domain/enum names."""
    naming = resolve_naming("PushNotificationFeatureToggle")

    assert naming.dto_name == "PushNotificationConfigDto"
    assert naming.domain_name == "PushNotificationConfig"
    assert naming.enum_name == "PushNotification"

def test_resolve_naming_override_only_replaces_its_own_name():
    """Test that each override suppresses only its own default."""
    naming = resolve_naming("PushNotificationFeatureToggle", domain_name="PushSettings")

    assert naming.dto_name == "PushNotificationConfigDto"
    assert naming.domain_name == "PushSettings"
    assert naming.enum_name == "PushNotification"

def test_resolve_naming_ignores_empty_override():
    naming = resolve_naming("PushNotificationFeatureToggle", dto_name="", enum_name="PUSH")

    assert naming.dto_name == "PushNotificationConfigDto"
    assert naming.enum_name == "PUSH"

@pytest.mark.parametrize("name, expected", [
    ("AdvancedCameraConfigDto", "advanced_camera_config_dto"),
    ("AppConfig", "app_config"),
    ("HTTPClientConfig", "http_client_config"),
    ("Ab2Config", "ab2_config"),
])
def test_snake_case(name, expected):
    assert snake_case(name) == expected

@pytest.mark.parametrize("key, expected", [
    ("advancedCamera", "advancedCamera"),
    ("push-notification", "push_notification"),
    ("2fa", "f2fa"),
    ("class", "class_"),
])
def test_attribute_name(key, expected):
    """Test that wire keys become usable attribute names."""
    assert attribute_name(key) == expected

def test_derived_helper_names():
    assert mapper_name("AdvancedCameraConfig") == "to_advanced_camera_config"
    assert fixture_name("AdvancedCameraConfigDto") == "advanced_camera_config_dto_fixture"
    assert use_case_name("AdvancedCameraConfig") == "IsAdvancedCameraConfigEnabledUseCase"
