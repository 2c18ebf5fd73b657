"""
Mapper generator.
Emits the DTO -> domain conversion functions of each feature and of the whole AppConfig.
"""
import ast
from typing import List, Optional, Sequence, Tuple
from core import syntax as s
from core.ir import FeatureDescriptor, FeatureField, NestedConfig
from core.naming import attribute_name, mapper_name, nested_mapper_name

AGGREGATE_MAPPER = "to_domain"


def _field_value(field: FeatureField, domain_type: str, owner: str) -> ast.expr:
    value = s.attribute("dto", field.name)
    if field.is_nested:
        return s.call(nested_mapper_name(owner, f"{field.type.name}Config"), [value])
    return s.if_else(
        s.is_none(value, negate=True),
        value,
        s.dotted(f"{domain_type}.DEFAULT.{field.name}"),
    )


def _field_values(fields: Sequence[FeatureField], domain_type: str, owner: str) -> List[Tuple[str, ast.expr]]:
    return [(field.name, _field_value(field, domain_type, owner)) for field in fields]


def _mapper(
    function_name: str,
    dto_type: str,
    domain_type: str,
    values: Sequence[Tuple[str, ast.expr]],
    missing: Optional[ast.expr] = None,
) -> ast.stmt:
    """
    A mapper returns 'missing' (the whole DEFAULT unless given) for a missing
    DTO and otherwise builds the domain object from the per-attribute expressions.
    """
    if missing is None:
        missing = s.dotted(f"{domain_type}.DEFAULT")
    body: List[ast.stmt] = [
        s.if_then(s.is_none("dto"), [s.returns(missing)]),
        s.returns(s.call(domain_type, keywords=values)),
    ]
    return s.function_def(
        function_name,
        [("dto", s.optional(dto_type))],
        body,
        returns_annotation=domain_type,
    )


def generate_nested_mapper(nested: NestedConfig, feature: FeatureDescriptor) -> ast.stmt:
    owner = feature.naming.domain_name
    domain_type = f"{owner}.{nested.domain_name}"
    return _mapper(
        nested_mapper_name(owner, nested.domain_name),
        f"{feature.naming.dto_name}.{nested.dto_name}",
        domain_type,
        _field_values(nested.fields, domain_type, owner),
    )


def generate_mapper(feature: FeatureDescriptor) -> List[ast.stmt]:
    """
    Mappers of one feature: nested mappers first, then the feature mapper.

    Returns:
        Function definitions in emission order
    """
    domain_name = feature.naming.domain_name
    functions = [generate_nested_mapper(nested, feature) for nested in feature.nested_configs]
    functions.append(_mapper(
        mapper_name(domain_name),
        feature.naming.dto_name,
        domain_name,
        _field_values(feature.fields, domain_name, domain_name),
    ))
    return functions


def generate_aggregate_mapper(features: Sequence[FeatureDescriptor]) -> ast.stmt:
    """
    'to_domain': maps every feature entry of an AppConfigDto through its own mapper.

    AppConfig has no DEFAULT; a missing payload maps every feature from None.
    """
    values = []
    missing = []
    for feature in features:
        attr = attribute_name(feature.key)
        feature_mapper = mapper_name(feature.naming.domain_name)
        values.append((attr, s.call(feature_mapper, [s.attribute("dto", attr)])))
        missing.append((attr, s.call(feature_mapper, [s.const(None)])))
    return _mapper(AGGREGATE_MAPPER, "AppConfigDto", "AppConfig", values, missing=s.call("AppConfig", keywords=missing))
