from fastapi import APIRouter, HTTPException, Depends

from schemas import FeatureSummary, GenerationRequest, ValidationResponse
from dependencies import get_dependencies, Dependencies

router = APIRouter()

@router.post("/features/validate", response_model=ValidationResponse)
async def validate_features(
    request: GenerationRequest,
    deps: Dependencies = Depends(get_dependencies)
) -> ValidationResponse:
    """Validate declarations and return the resolved names, without generating code."""
    if not deps.descriptor_builder:
        raise HTTPException(status_code=503, detail="Descriptor builder not initialized")

    descriptors, diagnostics = deps.descriptor_builder.build_all(request.declarations)

    features = [
        FeatureSummary(
            source_name=descriptor.source_name,
            feature_name=descriptor.feature_name,
            key=descriptor.key,
            title=descriptor.title,
            enabled_default=descriptor.enabled_default,
            dto_name=descriptor.naming.dto_name,
            domain_name=descriptor.naming.domain_name,
            enum_name=descriptor.naming.enum_name,
            fields=[field.name for field in descriptor.fields],
            nested_configs=[nested.class_name for nested in descriptor.nested_configs]
        )
        for descriptor in descriptors
    ]
    return ValidationResponse(features=features, diagnostics=diagnostics)
