"""
Intermediate representation of feature toggles.
Built once per generation run, immutable afterwards.
"""
from enum import Enum
from typing import Any, Optional, Tuple
from pydantic import BaseModel, ConfigDict

class TypeKind(str, Enum):
    """Classification of a field type."""
    BOOL = "bool"
    STRING = "string"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    NESTED = "nested"
    OPAQUE = "opaque"

    @property
    def is_scalar(self) -> bool:
        return self not in (TypeKind.NESTED, TypeKind.OPAQUE)


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class TypeRef(FrozenModel):
    """
    Resolved field type.

    Attributes:
        kind: Type classification
        name: Simple type name ('bool', 'int', nested class name, opaque type name)
        module: Module to import an opaque type from, if qualified
    """
    kind: TypeKind
    name: str
    module: Optional[str] = None


class DefaultKind(str, Enum):
    LITERAL = "literal"
    NESTED = "nested"
    CONSTRUCTOR = "constructor"


class DefaultValue(FrozenModel):
    """Default of a field: a literal, a nested default singleton or a no-arg constructor call."""
    kind: DefaultKind
    value: Any = None
    type_name: Optional[str] = None

    @classmethod
    def literal(cls, value: Any) -> "DefaultValue":
        return cls(kind=DefaultKind.LITERAL, value=value)

    @classmethod
    def nested(cls, domain_name: str) -> "DefaultValue":
        return cls(kind=DefaultKind.NESTED, type_name=domain_name)

    @classmethod
    def constructor(cls, type_name: str) -> "DefaultValue":
        return cls(kind=DefaultKind.CONSTRUCTOR, type_name=type_name)


class FeatureField(FrozenModel):
    """One constructor parameter of a feature or nested config."""
    name: str
    type: TypeRef
    default: DefaultValue

    @property
    def is_nested(self) -> bool:
        return self.type.kind == TypeKind.NESTED


class NestedConfig(FrozenModel):
    """
    Data shape declared inside a feature.

    Attributes:
        class_name: Local class name, unique within the enclosing feature
        fields: Ordered fields (one nesting level only)
    """
    class_name: str
    fields: Tuple[FeatureField, ...] = ()

    @property
    def dto_name(self) -> str:
        return f"{self.class_name}ConfigDto"

    @property
    def domain_name(self) -> str:
        return f"{self.class_name}Config"


class Naming(FrozenModel):
    """Generated type names of one feature."""
    dto_name: str
    domain_name: str
    enum_name: str


class FeatureDescriptor(FrozenModel):
    """
    Canonical unit of generation.

    Attributes:
        package: Dotted namespace of the declaration
        source_name: Declared class name
        feature_name: Declared name with the toggle suffix stripped
        title: Human readable title
        key: Wire key of the feature inside AppConfig
        enabled_default: Local default of the toggle in the FeatureToggles enum,
            independent of the 'enabled' field's own default
        fields: Ordered fields, always including 'enabled'
        nested_configs: Nested config shapes in declaration order
        naming: Generated type names
        source: Originating source unit, opaque
    """
    package: str
    source_name: str
    feature_name: str
    title: str
    key: str
    enabled_default: bool
    fields: Tuple[FeatureField, ...]
    nested_configs: Tuple[NestedConfig, ...] = ()
    naming: Naming
    source: Optional[str] = None

    def nested_config(self, class_name: str) -> Optional[NestedConfig]:
        for nested in self.nested_configs:
            if nested.class_name == class_name:
                return nested
        return None
