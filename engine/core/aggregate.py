"""
Aggregate composer.
Builds the batch-wide modules: the FeatureToggles enum, AppConfigDto/AppConfig,
the mappers module, the feature gate, fixtures, per-feature use cases and the
package __init__.
"""
import ast
from typing import List, Sequence, Tuple
from core import syntax as s
from core.generators import fixture_instance, frozen_dataclass, module_path, package_file
from core.ir import FeatureDescriptor
from core.mapper import AGGREGATE_MAPPER, generate_aggregate_mapper, generate_mapper
from core.naming import (
    attribute_name,
    fixture_name,
    mapper_name,
    module_name,
    nested_fixture_name,
    nested_mapper_name,
    use_case_name,
)
from core.syntax import SourceModule

ENUM_NAME = "FeatureToggles"
APP_CONFIG = "AppConfig"
APP_CONFIG_DTO = "AppConfigDto"
FIXTURES = "Fixtures"
DATA_STORE = "EnabledFeaturesDataStore"
GATE_FUNCTION = "is_feature_enabled"

MAPPERS_MODULE = "feature_toggle_mappers"
GATE_MODULE = "feature_gate"
INIT_MODULE = "__init__"

# Names every batch claims before any feature does
RESERVED_NAMES = frozenset({ENUM_NAME, APP_CONFIG, APP_CONFIG_DTO, FIXTURES, DATA_STORE, GATE_FUNCTION, AGGREGATE_MAPPER})
RESERVED_MODULES = frozenset({
    module_name(ENUM_NAME),
    module_name(APP_CONFIG),
    module_name(APP_CONFIG_DTO),
    module_name(FIXTURES),
    MAPPERS_MODULE,
    GATE_MODULE,
    INIT_MODULE,
})


def _import_features(module: SourceModule, features: Sequence[FeatureDescriptor], dto: bool, domain: bool) -> None:
    for feature in features:
        if dto:
            module.add_import(module_name(feature.naming.dto_name), feature.naming.dto_name, level=1)
        if domain:
            module.add_import(module_name(feature.naming.domain_name), feature.naming.domain_name, level=1)


def generate_enum(features: Sequence[FeatureDescriptor], package: str) -> SourceModule:
    """One FeatureToggles member per feature, valued (key, title, default_enabled)."""
    module = SourceModule(module_path(package, ENUM_NAME))
    module.add_import("enum", "Enum")

    body: List[ast.stmt] = [s.docstring("Feature toggles known at build time.")]
    for feature in features:
        body.append(s.assign(feature.naming.enum_name, s.tuple_of([
            s.const(feature.key),
            s.const(feature.title),
            s.const(feature.enabled_default),
        ])))
    body.append(s.function_def(
        "__init__",
        [("self", None), ("key", "str"), ("title", "str"), ("default_enabled", "bool")],
        [
            s.assign("self.key", s.name("key")),
            s.assign("self.title", s.name("title")),
            s.assign("self.default_enabled", s.name("default_enabled")),
        ],
    ))
    module.add(s.class_def(ENUM_NAME, body, bases=["Enum"]))
    return module


def generate_app_config_dto(features: Sequence[FeatureDescriptor], package: str) -> SourceModule:
    """Remote payload: one optional feature DTO per key, aliased to the raw key."""
    module = SourceModule(module_path(package, APP_CONFIG_DTO))
    module.add_import("typing", "Optional")
    module.add_import("pydantic", "BaseModel", "ConfigDict", "Field")
    _import_features(module, features, dto=True, domain=False)

    body: List[ast.stmt] = [
        s.docstring("Remote configuration payload, one entry per feature key."),
        s.assign("model_config", s.call("ConfigDict", keywords=[
            ("populate_by_name", s.const(True)),
            ("protected_namespaces", s.tuple_of([])),
        ])),
    ]
    for feature in features:
        body.append(s.ann_assign(
            attribute_name(feature.key),
            s.optional(feature.naming.dto_name),
            s.call("Field", keywords=[("default", s.const(None)), ("alias", s.const(feature.key))]),
        ))
    module.add(s.class_def(APP_CONFIG_DTO, body, bases=["BaseModel"]))
    return module


def generate_app_config(features: Sequence[FeatureDescriptor], package: str) -> SourceModule:
    """Domain aggregate: one feature domain model per key, with no DEFAULT of its own."""
    module = SourceModule(module_path(package, APP_CONFIG))
    module.add_import("dataclasses", "dataclass")
    for feature in features:
        domain_name = feature.naming.domain_name
        module.add_import(module_name(domain_name), domain_name, level=1)

    members = [(attribute_name(feature.key), feature.naming.domain_name) for feature in features]
    module.add(frozen_dataclass(
        APP_CONFIG,
        f"Resolved configuration of every feature, built by '{AGGREGATE_MAPPER}'.",
        members,
        with_default=False,
    ))
    return module


def generate_mappers_module(features: Sequence[FeatureDescriptor], package: str) -> SourceModule:
    """All feature mappers in batch order, then the aggregate 'to_domain'."""
    module = SourceModule(package_file(package, MAPPERS_MODULE))
    module.add_import("typing", "Optional")
    module.add_import(module_name(APP_CONFIG), APP_CONFIG, level=1)
    module.add_import(module_name(APP_CONFIG_DTO), APP_CONFIG_DTO, level=1)
    _import_features(module, features, dto=True, domain=True)

    for feature in features:
        module.extend(generate_mapper(feature))
    module.add(generate_aggregate_mapper(features))
    return module


def generate_feature_gate(package: str) -> SourceModule:
    """The data store contract and the local gate predicate shared by all use cases."""
    module = SourceModule(package_file(package, GATE_MODULE))
    module.add_import("typing", "Optional", "Protocol")
    module.add_import(module_name(APP_CONFIG), APP_CONFIG, level=1)
    module.add_import(module_name(ENUM_NAME), ENUM_NAME, level=1)

    module.add(s.class_def(DATA_STORE, [
        s.docstring("Holds the most recently fetched remote configuration, if any."),
        s.ann_assign("latest_fetched_enabled_features", s.optional(APP_CONFIG)),
    ], bases=["Protocol"]))

    module.add(s.function_def(
        GATE_FUNCTION,
        [],
        [
            s.docstring("True when every given toggle is enabled by default."),
            s.returns(s.call("all", [
                s.list_comp(s.attribute("toggle", "default_enabled"), "toggle", "feature_toggles"),
            ])),
        ],
        returns_annotation="bool",
        vararg=("feature_toggles", ENUM_NAME),
    ))
    return module


def generate_use_case(feature: FeatureDescriptor, package: str) -> SourceModule:
    """
    'Is<Domain>EnabledUseCase': local default AND the remote 'enabled' flag.

    The remote flag counts as False while the data store holds no configuration.
    """
    class_name = use_case_name(feature.naming.domain_name)
    module = SourceModule(module_path(package, class_name))
    module.add_import(GATE_MODULE, DATA_STORE, GATE_FUNCTION, level=1)
    module.add_import(module_name(ENUM_NAME), ENUM_NAME, level=1)

    remote = s.attribute(s.attribute("app_config", attribute_name(feature.key)), "enabled")
    init = s.function_def(
        "__init__",
        [("self", None), ("enabled_features_data_store", DATA_STORE)],
        [s.assign("self._enabled_features_data_store", s.name("enabled_features_data_store"))],
        returns_annotation=s.const(None),
    )
    execute = s.function_def(
        "execute",
        [("self", None)],
        [
            s.assign("app_config", s.dotted("self._enabled_features_data_store.latest_fetched_enabled_features")),
            s.assign("remote_enabled", s.if_else(s.is_none("app_config", negate=True), remote, s.const(False))),
            s.returns(s.both(
                s.call(GATE_FUNCTION, [s.dotted(f"{ENUM_NAME}.{feature.naming.enum_name}")]),
                s.name("remote_enabled"),
            )),
        ],
        returns_annotation="bool",
    )
    module.add(s.class_def(class_name, [
        s.docstring(f"Whether the '{feature.title}' feature is enabled locally and remotely."),
        init,
        execute,
    ]))
    return module


def generate_fixtures(features: Sequence[FeatureDescriptor], package: str) -> SourceModule:
    """
    Fixtures registry: one canned instance per generated type.

    Nested fixtures come first so that feature fixtures can reference them,
    then the feature fixtures, then the two aggregate fixtures.
    """
    module = SourceModule(module_path(package, FIXTURES))
    module.add_import(module_name(APP_CONFIG), APP_CONFIG, level=1)
    module.add_import(module_name(APP_CONFIG_DTO), APP_CONFIG_DTO, level=1)
    _import_features(module, features, dto=True, domain=True)

    body: List[ast.stmt] = [s.docstring("Canned sample instances of every generated type.")]
    for feature in features:
        owner = feature.naming.domain_name
        for nested in feature.nested_configs:
            nested_dto = f"{feature.naming.dto_name}.{nested.dto_name}"
            nested_domain = f"{owner}.{nested.domain_name}"
            body.append(s.assign(
                nested_fixture_name(owner, nested.dto_name),
                fixture_instance(nested_dto, nested.fields, is_dto=True),
            ))
            body.append(s.assign(
                nested_fixture_name(owner, nested.domain_name),
                fixture_instance(nested_domain, nested.fields, is_dto=False),
            ))
    for feature in features:
        naming = feature.naming
        body.append(s.assign(
            fixture_name(naming.dto_name),
            fixture_instance(naming.dto_name, feature.fields, is_dto=True, owner=naming.domain_name),
        ))
        body.append(s.assign(
            fixture_name(naming.domain_name),
            fixture_instance(naming.domain_name, feature.fields, is_dto=False, owner=naming.domain_name),
        ))

    body.append(s.assign(fixture_name(APP_CONFIG_DTO), s.call(APP_CONFIG_DTO, keywords=[
        (attribute_name(feature.key), s.name(fixture_name(feature.naming.dto_name))) for feature in features
    ])))
    body.append(s.assign(fixture_name(APP_CONFIG), s.call(APP_CONFIG, keywords=[
        (attribute_name(feature.key), s.name(fixture_name(feature.naming.domain_name))) for feature in features
    ])))
    module.add(s.class_def(FIXTURES, body))
    return module


def exported_names(features: Sequence[FeatureDescriptor]) -> List[Tuple[str, str]]:
    """(module, name) of every public name of the generated package."""
    exports = [
        (module_name(ENUM_NAME), ENUM_NAME),
        (module_name(APP_CONFIG), APP_CONFIG),
        (module_name(APP_CONFIG_DTO), APP_CONFIG_DTO),
        (module_name(FIXTURES), FIXTURES),
        (GATE_MODULE, DATA_STORE),
        (GATE_MODULE, GATE_FUNCTION),
        (MAPPERS_MODULE, AGGREGATE_MAPPER),
    ]
    for feature in features:
        naming = feature.naming
        exports.append((module_name(naming.dto_name), naming.dto_name))
        exports.append((module_name(naming.domain_name), naming.domain_name))
        exports.append((MAPPERS_MODULE, mapper_name(naming.domain_name)))
        use_case = use_case_name(naming.domain_name)
        exports.append((module_name(use_case), use_case))
        for nested in feature.nested_configs:
            exports.append((MAPPERS_MODULE, nested_mapper_name(naming.domain_name, nested.domain_name)))
    return exports


def generate_package_init(features: Sequence[FeatureDescriptor], package: str) -> SourceModule:
    """Package __init__ re-exporting every public name."""
    module = SourceModule(package_file(package, INIT_MODULE), doc=f"Feature toggles of the '{package}' package.")
    exports = exported_names(features)
    for source_module, exported in exports:
        module.add_import(source_module, exported, level=1)
    module.add(s.assign("__all__", ast.List(elts=[s.const(exported) for exported in sorted(n for _, n in exports)], ctx=ast.Load())))
    return module
