from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings managed by Pydantic."""

    # Generation
    DEFAULT_PACKAGE: str = "feature_toggles"
    OUTPUT_DIR: str = "generated"
    GENERATION_WORKERS: int = 1

    # gRPC service client naming
    GRPC_CLIENT_MODULE: str = "grpc_clients"
    GRPC_INTERFACE_SUFFIX: str = "Grpc"
    GRPC_CLIENT_SUFFIX: str = "ServiceClient"

    # CORS
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]

    # Logging
    LOG_LEVEL: str = "info"
    DEBUG_LOGGING: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

settings = Settings()
