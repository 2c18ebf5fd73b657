"""
Naming resolver.
Derives feature names, generated type names and the Python identifiers built from them.
"""
import keyword
import re
from typing import Optional
from core.ir import Naming

FEATURE_SUFFIXES = ("FeatureToggle", "Feature", "Toggle")

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_NON_IDENTIFIER = re.compile(r"[^0-9A-Za-z_]")


def derive_feature_name(source_name: str) -> str:
    """
    Strip the first matching toggle suffix from a declared name.

    'PushNotificationFeatureToggle' -> 'PushNotification'. A name that is only a
    suffix is left unchanged.
    """
    for suffix in FEATURE_SUFFIXES:
        if source_name.endswith(suffix):
            stripped = source_name[: -len(suffix)]
            return stripped or source_name
    return source_name


def resolve_naming(
    source_name: str,
    dto_name: Optional[str] = None,
    domain_name: Optional[str] = None,
    enum_name: Optional[str] = None,
) -> Naming:
    """Resolve the three generated names; each non-empty override replaces only its own default."""
    feature_name = derive_feature_name(source_name)
    return Naming(
        dto_name=dto_name or f"{feature_name}ConfigDto",
        domain_name=domain_name or f"{feature_name}Config",
        enum_name=enum_name or feature_name,
    )


def snake_case(name: str) -> str:
    """'AdvancedCameraConfigDto' -> 'advanced_camera_config_dto'."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def is_identifier(name: Optional[str]) -> bool:
    return bool(name) and name.isidentifier() and not keyword.iskeyword(name)


def attribute_name(key: str) -> str:
    """Turn a wire key into a Python attribute name."""
    name = _NON_IDENTIFIER.sub("_", key)
    if not name or not name[0].isalpha():
        name = f"f{name}"
    if keyword.iskeyword(name):
        name = f"{name}_"
    return name


def module_name(type_name: str) -> str:
    return snake_case(type_name)


def mapper_name(domain_name: str) -> str:
    return f"to_{snake_case(domain_name)}"


def fixture_name(type_name: str) -> str:
    return f"{snake_case(type_name)}_fixture"


def use_case_name(domain_name: str) -> str:
    return f"Is{domain_name}EnabledUseCase"


def nested_mapper_name(owner_domain_name: str, nested_domain_name: str) -> str:
    """Mapper of a nested config, qualified by the owning feature's domain name."""
    return mapper_name(f"{owner_domain_name}{nested_domain_name}")


def nested_fixture_name(owner_domain_name: str, nested_type_name: str) -> str:
    """Fixture of a nested config type, qualified by the owning feature's domain name."""
    return fixture_name(f"{owner_domain_name}{nested_type_name}")
