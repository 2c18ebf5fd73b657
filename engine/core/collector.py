"""
Field and nested-type collector.
Classifies declared parameters and captures nested config shapes.
"""
from typing import Any, Iterable, List, NamedTuple, Optional, Set, Tuple
from pydantic import BaseModel
from core.declarations import NestedDeclaration, ParameterRecord
from core.ir import DefaultValue, FeatureField, NestedConfig, TypeKind, TypeRef
from core.naming import is_identifier

_SCALAR_ALIASES = {
    "Bool": TypeKind.BOOL,
    "Boolean": TypeKind.BOOL,
    "bool": TypeKind.BOOL,
    "String": TypeKind.STRING,
    "str": TypeKind.STRING,
    "Int": TypeKind.INT32,
    "Int32": TypeKind.INT32,
    "Long": TypeKind.INT64,
    "Int64": TypeKind.INT64,
    "int": TypeKind.INT64,
    "Float": TypeKind.FLOAT32,
    "Float32": TypeKind.FLOAT32,
    "Double": TypeKind.FLOAT64,
    "Float64": TypeKind.FLOAT64,
    "float": TypeKind.FLOAT64,
}

PYTHON_TYPES = {
    TypeKind.BOOL: "bool",
    TypeKind.STRING: "str",
    TypeKind.INT32: "int",
    TypeKind.INT64: "int",
    TypeKind.FLOAT32: "float",
    TypeKind.FLOAT64: "float",
}

_ZERO_VALUES = {
    TypeKind.BOOL: False,
    TypeKind.STRING: "",
    TypeKind.INT32: 0,
    TypeKind.INT64: 0,
    TypeKind.FLOAT32: 0.0,
    TypeKind.FLOAT64: 0.0,
}

# Names the generated classes already use for imports or class attributes,
# and the members every generated DTO inherits
RESERVED_FIELD_NAMES = frozenset({
    "DEFAULT", "Optional", "ClassVar", "BaseModel", "ConfigDict", "Field", "dataclass",
    "bool", "str", "int", "float",
}) | frozenset(dir(BaseModel))

_QUALIFIER = "kotlin."


def resolve_type(descriptor: str, nested_names: Iterable[str] = ()) -> TypeRef:
    """
    Resolve a type descriptor against the scalar table and the known nested class names.

    Nested classes are matched on the simple name, so both 'FilterSettings' and
    'AdvancedCameraFeatureToggle.FilterSettings' resolve to the nested config.
    """
    text = descriptor.strip().rstrip("?")
    if text.startswith(_QUALIFIER) and text[len(_QUALIFIER):] in _SCALAR_ALIASES:
        text = text[len(_QUALIFIER):]

    kind = _SCALAR_ALIASES.get(text)
    if kind is not None:
        return TypeRef(kind=kind, name=PYTHON_TYPES[kind])

    simple_name = text.rsplit(".", 1)[-1]
    if simple_name in set(nested_names):
        return TypeRef(kind=TypeKind.NESTED, name=simple_name)

    if "." in text:
        module, name = text.rsplit(".", 1)
        return TypeRef(kind=TypeKind.OPAQUE, name=name, module=module)
    return TypeRef(kind=TypeKind.OPAQUE, name=text)


def _coerce_literal(kind: TypeKind, value: Any) -> Tuple[bool, Any]:
    if kind == TypeKind.BOOL:
        return isinstance(value, bool), value
    if kind == TypeKind.STRING:
        return isinstance(value, str), value
    if isinstance(value, bool):
        return False, value
    if kind in (TypeKind.INT32, TypeKind.INT64):
        return isinstance(value, int), value
    if isinstance(value, (int, float)):
        return True, float(value)
    return False, value


def synthesize_default(parameter: ParameterRecord, type_ref: TypeRef) -> Optional[DefaultValue]:
    """
    Build the default of a field, or None when it cannot be resolved.

    Opaque types fall back to a no-argument constructor call; whether that
    constructor exists is only known when the generated code runs.
    """
    if not parameter.has_default:
        return None
    if type_ref.kind == TypeKind.NESTED:
        return DefaultValue.nested(f"{type_ref.name}Config")
    if type_ref.kind == TypeKind.OPAQUE:
        return DefaultValue.constructor(type_ref.name)
    if parameter.default is None:
        return DefaultValue.literal(_ZERO_VALUES[type_ref.kind])

    matches, value = _coerce_literal(type_ref.kind, parameter.default)
    if not matches:
        return None
    return DefaultValue.literal(value)


def _type_is_resolvable(type_ref: TypeRef) -> bool:
    if not is_identifier(type_ref.name):
        return False
    if type_ref.module is None:
        return True
    return all(is_identifier(part) for part in type_ref.module.split("."))


def collect_fields(
    parameters: Iterable[ParameterRecord],
    nested_names: Iterable[str] = (),
    deeper_names: Iterable[str] = (),
) -> Tuple[List[FeatureField], List[str]]:
    """
    Collect the fields of a declared shape.

    Args:
        parameters: Ordered constructor parameters
        nested_names: Class names of nested configs already discovered
        deeper_names: Class names a field may not reference because they sit
            below the one nesting level that is generated

    Returns:
        Tuple of (collected fields in declaration order, problems of the skipped parameters)
    """
    nested_names = set(nested_names)
    deeper_names = set(deeper_names)
    fields: List[FeatureField] = []
    problems: List[str] = []
    seen: Set[str] = set()

    for parameter in parameters:
        name = parameter.name
        if not name:
            problems.append("a parameter has no name")
            continue
        if not is_identifier(name) or name.startswith(("_", "model_")) or name in RESERVED_FIELD_NAMES:
            problems.append(f"'{name}' is not a usable field name")
            continue
        if name in seen:
            problems.append(f"'{name}' is declared more than once")
            continue

        type_ref = resolve_type(parameter.type, nested_names | deeper_names)
        if type_ref.kind == TypeKind.NESTED and type_ref.name in deeper_names:
            problems.append(f"'{name}' references '{type_ref.name}', nested configs are collected one level deep")
            continue
        if not _type_is_resolvable(type_ref):
            problems.append(f"'{name}' has an unsupported type '{parameter.type}'")
            continue

        default = synthesize_default(parameter, type_ref)
        if default is None:
            if parameter.has_default:
                problems.append(f"'{name}' default {parameter.default!r} does not match type '{parameter.type}'")
            else:
                problems.append(f"'{name}' has no default value")
            continue

        seen.add(name)
        fields.append(FeatureField(name=name, type=type_ref, default=default))

    return fields, problems


def collect_nested_configs(
    declarations: Iterable[NestedDeclaration],
) -> Tuple[List[NestedConfig], List[str], List[str]]:
    """
    Capture the nested config shapes of a feature.

    Only data classes count. A nested config's field may not reference another
    nested class, neither a sibling nor one of its own inner classes, so deeper
    nesting is never followed.

    Returns:
        Tuple of (nested configs, problems of skipped nested fields, names of ignored inner declarations)
    """
    configs: List[NestedConfig] = []
    problems: List[str] = []
    ignored: List[str] = []

    declarations = list(declarations)
    siblings = {declaration.name for declaration in declarations}
    for declaration in declarations:
        if declaration.kind != "data_class":
            continue
        inner_names = {inner.name for inner in declaration.nested}
        fields, field_problems = collect_fields(declaration.parameters, deeper_names=siblings | inner_names)
        problems.extend(f"{declaration.name}: {problem}" for problem in field_problems)
        ignored.extend(f"{declaration.name}.{inner.name}" for inner in declaration.nested)
        configs.append(NestedConfig(class_name=declaration.name, fields=tuple(fields)))

    return configs, problems, ignored


class Collection(NamedTuple):
    fields: List[FeatureField]
    nested_configs: List[NestedConfig]
    problems: List[str]
    nested_problems: List[str]
    ignored: List[str]


def collect(
    parameters: Iterable[ParameterRecord],
    nested: Iterable[NestedDeclaration],
) -> Collection:
    """
    Collect a feature's fields and nested configs.

    Nested configs are discovered first so that field types can be checked
    against their class names.
    """
    nested_configs, nested_problems, ignored = collect_nested_configs(nested)
    fields, problems = collect_fields(parameters, (config.class_name for config in nested_configs))
    return Collection(fields, nested_configs, problems, nested_problems, ignored)
