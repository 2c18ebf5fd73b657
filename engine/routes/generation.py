from fastapi import APIRouter, HTTPException, Depends

from core.diagnostics import NamingCollisionError
from schemas import GenerationRequest, GenerationResponse, GrpcGenerationRequest
from dependencies import get_dependencies, Dependencies

router = APIRouter()

def _collision_conflict(error: NamingCollisionError) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail={
            "message": str(error),
            "diagnostics": [d.model_dump(mode="json") for d in error.diagnostics],
        },
    )

@router.post("/generate", response_model=GenerationResponse)
async def generate_feature_toggles(
    request: GenerationRequest,
    deps: Dependencies = Depends(get_dependencies)
) -> GenerationResponse:
    """Generate the feature toggle package for a batch of declarations."""
    if not deps.generator:
        raise HTTPException(status_code=503, detail="Generator not initialized")

    try:
        result = deps.generator.generate(request.declarations)
    except NamingCollisionError as e:
        deps.logger.log_error(str(e), "generation")
        raise _collision_conflict(e)

    return GenerationResponse(
        package=result.package,
        files=result.files,
        diagnostics=result.diagnostics
    )

@router.post("/generate/grpc", response_model=GenerationResponse)
async def generate_grpc_stubs(
    request: GrpcGenerationRequest,
    deps: Dependencies = Depends(get_dependencies)
) -> GenerationResponse:
    """Generate gRPC implementations for a batch of annotated interfaces."""
    if not deps.grpc_generator:
        raise HTTPException(status_code=503, detail="gRPC generator not initialized")

    try:
        result = deps.grpc_generator.generate(request.interfaces)
    except NamingCollisionError as e:
        deps.logger.log_error(str(e), "generation")
        raise _collision_conflict(e)

    return GenerationResponse(
        package=result.package,
        files=result.files,
        diagnostics=result.diagnostics
    )
