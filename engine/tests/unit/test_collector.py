import pytest
from core.collector import collect, collect_fields, collect_nested_configs, resolve_type
from core.declarations import NestedDeclaration
from core.ir import DefaultValue, TypeKind

@pytest.mark.parametrize("descriptor, kind, name", [
    ("Boolean", TypeKind.BOOL, "bool"),
    ("kotlin.Boolean", TypeKind.BOOL, "bool"),
    ("String?", TypeKind.STRING, "str"),
    ("Int", TypeKind.INT32, "int"),
    ("Long", TypeKind.INT64, "int"),
    ("Float", TypeKind.FLOAT32, "float"),
    ("Double", TypeKind.FLOAT64, "float"),
    ("float", TypeKind.FLOAT64, "float"),
])
def test_resolve_scalar_types(descriptor, kind, name):
    type_ref = resolve_type(descriptor)

    assert type_ref.kind == kind
    assert type_ref.name == name
    assert type_ref.module is None

def test_resolve_nested_type_by_simple_name():
    """Test that qualified and simple nested names both resolve to the nested config."""
    assert resolve_type("FilterSettings", ["FilterSettings"]).kind == TypeKind.NESTED
    nested = resolve_type("AdvancedCameraFeatureToggle.FilterSettings", ["FilterSettings"])
    assert nested.kind == TypeKind.NESTED
    assert nested.name == "FilterSettings"

def test_resolve_opaque_type_keeps_its_module():
    type_ref = resolve_type("datetime.timedelta")

    assert type_ref.kind == TypeKind.OPAQUE
    assert type_ref.name == "timedelta"
    assert type_ref.module == "datetime"

def test_collect_fields_synthesizes_defaults(make_param):
    """Test literal, zero-value and constructor defaults."""
    fields, problems = collect_fields([
        make_param("enabled", "Boolean", True),
        make_param("label", "String"),
        make_param("ratio", "Double", 2),
        make_param("window", "datetime.timedelta"),
    ])

    assert problems == []
    defaults = {field.name: field.default for field in fields}
    assert defaults["enabled"] == DefaultValue.literal(True)
    assert defaults["label"] == DefaultValue.literal("")
    # Integer literals are widened for float fields
    assert defaults["ratio"].value == 2.0
    assert isinstance(defaults["ratio"].value, float)
    assert defaults["window"] == DefaultValue.constructor("timedelta")

def test_collect_fields_preserves_declaration_order(make_param):
    fields, _ = collect_fields([
        make_param("zeta", "Int", 1),
        make_param("alpha", "Int", 2),
        make_param("enabled", "Boolean", True),
    ])

    assert [field.name for field in fields] == ["zeta", "alpha", "enabled"]

@pytest.mark.parametrize("parameter_args, problem", [
    (("count", "Int", None, False), "'count' has no default value"),
    (("count", "Int", True), "does not match type"),
    (("count", "Int", "3"), "does not match type"),
    (("class", "Int", 1), "is not a usable field name"),
    (("DEFAULT", "Int", 1), "is not a usable field name"),
    (("model_name", "String", "x"), "is not a usable field name"),
    (("json", "String", "x"), "is not a usable field name"),
    (("copy", "Int", 1), "is not a usable field name"),
    (("count", "List<Int>", None), "unsupported type"),
])
def test_collect_fields_reports_problems(make_param, parameter_args, problem):
    """Test that unusable parameters are skipped and reported."""
    fields, problems = collect_fields([make_param(*parameter_args)])

    assert fields == []
    assert len(problems) == 1
    assert problem in problems[0]

def test_collect_fields_rejects_duplicates(make_param):
    fields, problems = collect_fields([make_param("count", "Int", 1), make_param("count", "Int", 2)])

    assert len(fields) == 1
    assert "declared more than once" in problems[0]

def test_collect_nested_configs_stays_one_level_deep(make_param):
    """Test that a nested config's own nested declarations are ignored."""
    declaration = NestedDeclaration(
        name="FilterSettings",
        parameters=[make_param("minZoom", "Int", 1), make_param("lens", "Lens")],
        nested=[NestedDeclaration(name="Lens", parameters=[make_param("focal", "Int", 35)])],
    )

    configs, problems, ignored = collect_nested_configs([declaration])

    assert len(configs) == 1
    assert ignored == ["FilterSettings.Lens"]
    assert [field.name for field in configs[0].fields] == ["minZoom"]
    assert problems == ["FilterSettings: 'lens' references 'Lens', nested configs are collected one level deep"]

def test_collect_nested_configs_drops_sibling_references(make_param):
    configs, problems, _ = collect_nested_configs([
        NestedDeclaration(name="Lens", parameters=[make_param("focal", "Int", 35)]),
        NestedDeclaration(name="Limits", parameters=[
            make_param("max", "Int", 3),
            make_param("lens", "AdvancedCameraFeatureToggle.Lens?"),
        ]),
    ])

    assert [config.class_name for config in configs] == ["Lens", "Limits"]
    assert [field.name for field in configs[1].fields] == ["max"]
    assert problems == ["Limits: 'lens' references 'Lens', nested configs are collected one level deep"]

def test_collect_nested_configs_skips_non_data_classes(make_param):
    configs, _, _ = collect_nested_configs([
        NestedDeclaration(name="Helper", kind="object"),
        NestedDeclaration(name="Limits", parameters=[make_param("max", "Int", 3)]),
    ])

    assert [config.class_name for config in configs] == ["Limits"]

def test_collect_discovers_nested_configs_before_fields(camera_record):
    """Test that fields typed as a nested class become nested references."""
    collection = collect(camera_record.parameters, camera_record.nested)

    assert collection.problems == []
    filter_settings = collection.fields[2]
    assert filter_settings.is_nested
    assert filter_settings.default == DefaultValue.nested("FilterSettingsConfig")
    assert [field.default.value for field in collection.nested_configs[0].fields] == [1, 12]

def test_collect_reports_nested_problems_separately(make_param):
    collection = collect(
        [make_param("enabled", "Boolean", True)],
        [NestedDeclaration(name="Limits", parameters=[make_param("max", "Int", "many")])],
    )

    assert collection.problems == []
    assert len(collection.nested_problems) == 1
    assert collection.nested_problems[0].startswith("Limits: 'max'")
    assert collection.nested_configs[0].fields == ()
