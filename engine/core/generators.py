"""
Type generators.
Each function turns one feature descriptor into the syntax tree of one generated module.
"""
import ast
from typing import Iterable, List, Optional, Sequence, Tuple
from core import syntax as s
from core.ir import DefaultKind, FeatureDescriptor, FeatureField, NestedConfig, TypeKind
from core.naming import module_name, nested_fixture_name
from core.syntax import SourceModule

FIXTURE_VALUES = {
    TypeKind.BOOL: True,
    TypeKind.INT32: 42,
    TypeKind.INT64: 1000,
    TypeKind.FLOAT64: 3.14,
    TypeKind.FLOAT32: 2.5,
}

DTO_MODEL_CONFIG = s.call(
    "ConfigDict",
    keywords=[
        ("populate_by_name", s.const(True)),
        ("arbitrary_types_allowed", s.const(True)),
        ("protected_namespaces", s.tuple_of([])),
    ],
)


def package_file(package: str, module: str) -> str:
    """Output path of a module inside the generated package."""
    return "/".join(package.split(".") + [f"{module}.py"])


def module_path(package: str, type_name: str) -> str:
    """Output path of the module holding a generated top-level type."""
    return package_file(package, module_name(type_name))


def _add_opaque_imports(module: SourceModule, fields: Iterable[FeatureField]) -> None:
    for field in fields:
        if field.type.kind == TypeKind.OPAQUE and field.type.module:
            module.add_import(field.type.module, field.type.name)


def _dto_field(field: FeatureField) -> ast.AnnAssign:
    annotation = f"{field.type.name}ConfigDto" if field.is_nested else field.type.name
    return s.ann_assign(
        field.name,
        s.optional(annotation),
        s.call("Field", keywords=[("default", s.const(None)), ("alias", s.const(field.name))]),
    )


def _nested_dto_class(nested: NestedConfig) -> ast.ClassDef:
    body: List[ast.stmt] = [s.assign("model_config", DTO_MODEL_CONFIG)]
    body.extend(_dto_field(field) for field in nested.fields)
    return s.class_def(nested.dto_name, body, bases=["BaseModel"])


def generate_dto(feature: FeatureDescriptor, package: str) -> SourceModule:
    """
    Nullable transport DTO of a feature.

    Every field is optional and aliased to its wire key; nested config DTOs are
    inner classes, declared before the fields that reference them.
    """
    dto_name = feature.naming.dto_name
    module = SourceModule(module_path(package, dto_name))
    module.add_import("typing", "Optional")
    module.add_import("pydantic", "BaseModel", "ConfigDict", "Field")
    _add_opaque_imports(module, feature.fields)
    for nested in feature.nested_configs:
        _add_opaque_imports(module, nested.fields)

    body: List[ast.stmt] = [
        s.docstring(f"Nullable transport shape of the '{feature.title}' feature."),
        s.assign("model_config", DTO_MODEL_CONFIG),
    ]
    body.extend(_nested_dto_class(nested) for nested in feature.nested_configs)
    body.extend(_dto_field(field) for field in feature.fields)

    module.add(s.class_def(dto_name, body, bases=["BaseModel"]))
    return module


def default_expr(field: FeatureField, owner: Optional[str] = None) -> ast.expr:
    """
    Expression building a field's default value.

    A nested default refers to the nested model's DEFAULT, an inner class of
    'owner' when given.
    """
    if field.default.kind == DefaultKind.NESTED:
        class_path = f"{owner}.{field.default.type_name}" if owner else field.default.type_name
        return s.dotted(f"{class_path}.DEFAULT")
    if field.default.kind == DefaultKind.CONSTRUCTOR:
        return s.call(field.default.type_name)
    return s.const(field.default.value)


def frozen_dataclass(
    class_name: str,
    doc: str,
    members: Sequence[Tuple[str, s.Expr]],
    inner: Sequence[ast.stmt] = (),
    with_default: bool = True,
) -> ast.ClassDef:
    """
    Frozen dataclass with an optional DEFAULT class variable.

    Args:
        class_name: Name of the dataclass
        doc: Class docstring
        members: (attribute, annotation) in declaration order
        inner: Inner class definitions, emitted before the members that reference them
        with_default: Whether to declare the DEFAULT singleton, assigned after the class
    """
    body: List[ast.stmt] = [s.docstring(doc)]
    body.extend(inner)
    body.extend(s.ann_assign(attr, annotation) for attr, annotation in members)
    if with_default:
        body.append(s.ann_assign("DEFAULT", s.subscript("ClassVar", s.const(class_name))))

    frozen = s.call("dataclass", keywords=[("frozen", s.const(True))])
    return s.class_def(class_name, body, decorators=[frozen])


def default_assignment(class_path: str, defaults: Sequence[Tuple[str, ast.expr]]) -> ast.stmt:
    """'<class_path>.DEFAULT = <class_path>(...)'."""
    return s.assign(f"{class_path}.DEFAULT", s.call(class_path, keywords=list(defaults)))


def _domain_annotation(field: FeatureField) -> str:
    return f"{field.type.name}Config" if field.is_nested else field.type.name


def _nested_domain_class(nested: NestedConfig) -> ast.ClassDef:
    return frozen_dataclass(
        nested.domain_name,
        f"Nested '{nested.class_name}' configuration.",
        [(field.name, _domain_annotation(field)) for field in nested.fields],
    )


def generate_domain(feature: FeatureDescriptor, package: str) -> SourceModule:
    """
    Non-null domain model of a feature with its DEFAULT singleton.

    Nested config models are inner classes, each with its own DEFAULT; nested
    fields default to it. DEFAULT singletons are assigned leaves first.
    """
    domain_name = feature.naming.domain_name
    module = SourceModule(module_path(package, domain_name))
    module.add_import("dataclasses", "dataclass")
    module.add_import("typing", "ClassVar")
    _add_opaque_imports(module, feature.fields)
    for nested in feature.nested_configs:
        _add_opaque_imports(module, nested.fields)

    module.add(frozen_dataclass(
        domain_name,
        f"Configuration of the '{feature.title}' feature.",
        [(field.name, _domain_annotation(field)) for field in feature.fields],
        inner=[_nested_domain_class(nested) for nested in feature.nested_configs],
    ))
    for nested in feature.nested_configs:
        module.add(default_assignment(
            f"{domain_name}.{nested.domain_name}",
            [(field.name, default_expr(field)) for field in nested.fields],
        ))
    module.add(default_assignment(domain_name, [(field.name, default_expr(field, domain_name)) for field in feature.fields]))
    return module


def fixture_value(field: FeatureField, is_dto: bool, owner: Optional[str] = None) -> ast.expr:
    """Canned sample value of a field; nested fields reference the nested fixture of 'owner'."""
    if field.is_nested:
        suffix = "ConfigDto" if is_dto else "Config"
        return s.name(nested_fixture_name(owner or "", f"{field.type.name}{suffix}"))
    if field.type.kind == TypeKind.STRING:
        return s.const(f"sample_{field.name}")
    return s.const(FIXTURE_VALUES.get(field.type.kind))


def fixture_instance(
    type_expr: s.Expr, fields: Iterable[FeatureField], is_dto: bool, owner: Optional[str] = None
) -> ast.Call:
    """Constructor call building the fixture of one generated type."""
    return s.call(type_expr, keywords=[(field.name, fixture_value(field, is_dto, owner)) for field in fields])
