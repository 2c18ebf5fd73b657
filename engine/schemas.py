from typing import List, Optional
from pydantic import BaseModel

from core.declarations import DeclarationRecord, GrpcInterfaceRecord
from core.diagnostics import Diagnostic
from core.syntax import GeneratedFile

class GenerationRequest(BaseModel):
    declarations: List[DeclarationRecord]

class GrpcGenerationRequest(BaseModel):
    interfaces: List[GrpcInterfaceRecord]

class GenerationResponse(BaseModel):
    package: Optional[str] = None
    files: List[GeneratedFile] = []
    diagnostics: List[Diagnostic] = []

class FeatureSummary(BaseModel):
    source_name: str
    feature_name: str
    key: str
    title: str
    enabled_default: bool
    dto_name: str
    domain_name: str
    enum_name: str
    fields: List[str] = []
    nested_configs: List[str] = []

class ValidationResponse(BaseModel):
    features: List[FeatureSummary] = []
    diagnostics: List[Diagnostic] = []
