"""
Raw declaration records handed over by the descriptor extractor.
These are the input boundary of the generator: plain data, no reflection.
"""
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field

class RecordModel(BaseModel):
    """Base for input records: accepts both wire (camelCase) and field names."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class ParameterRecord(RecordModel):
    """
    One constructor parameter of a declared feature or nested config.

    Attributes:
        name: Parameter name (None when the extractor could not resolve it)
        type: Type descriptor, e.g. 'Bool', 'Int64', 'FilterSettings', 'datetime.timedelta'
        has_default: Whether the declaration carries a default value
        default: The declared default literal, when the extractor could read it
    """
    name: Optional[str] = None
    type: str
    has_default: bool = Field(False, alias="hasDefault")
    default: Any = None


class ToggleAnnotation(RecordModel):
    """Arguments of the feature toggle annotation."""
    title: Optional[str] = None
    key: Optional[str] = None
    default_enabled: bool = Field(False, alias="defaultEnabled")
    dto_name: Optional[str] = Field(None, alias="dtoName")
    domain_name: Optional[str] = Field(None, alias="domainName")
    enum_name: Optional[str] = Field(None, alias="enumName")


class NestedDeclaration(RecordModel):
    """A class declared inside a feature declaration."""
    name: str
    kind: str = "data_class"
    parameters: List[ParameterRecord] = []
    nested: List["NestedDeclaration"] = []


class DeclarationRecord(RecordModel):
    """
    One annotated feature declaration.

    Attributes:
        name: Declared class name, e.g. 'AdvancedCameraFeatureToggle'
        package: Dotted namespace of the declaration
        kind: Declaration kind; only 'data_class' is accepted for generation
        has_primary_constructor: Whether the declaration has a primary constructor
        annotation: Annotation arguments
        parameters: Ordered constructor parameters
        nested: Classes declared inside the feature
        source: Originating source unit, opaque to the generator
    """
    name: str
    package: str = ""
    kind: str = "data_class"
    has_primary_constructor: bool = Field(True, alias="hasPrimaryConstructor")
    annotation: ToggleAnnotation = ToggleAnnotation()
    parameters: List[ParameterRecord] = []
    nested: List[NestedDeclaration] = []
    source: Optional[str] = None


class GrpcMethodRecord(RecordModel):
    """An annotated endpoint of a gRPC interface."""
    method_name: str = Field(alias="methodName")
    function_name: Optional[str] = Field(None, alias="functionName")
    request_type: str = Field(alias="requestType")
    response_type: str = Field(alias="responseType")


class GrpcInterfaceRecord(RecordModel):
    """
    An annotated gRPC interface.

    Attributes:
        interface_name: Simple name of the interface
        module: Dotted module the interface is importable from
        package: Output package for the generated implementation
        service_client: Explicit service client class name, overrides the naming heuristic
        methods: Annotated endpoints in declaration order
    """
    interface_name: str = Field(alias="interfaceName")
    module: str
    package: str = ""
    service_client: Optional[str] = Field(None, alias="serviceClient")
    methods: List[GrpcMethodRecord] = []
