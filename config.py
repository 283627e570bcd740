from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # =========================
    # Upstream (rules / alerts API)
    # =========================
    UPSTREAM_URL: str = Field(default="http://localhost:9090")
    UPSTREAM_TIMEOUT: float = Field(default=30.0)

    # =========================
    # Tenancy
    # =========================
    # Label name carrying the tenant identity, fixed per deployment.
    LABEL: str = Field(default="namespace")

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


# Singleton
settings = Settings()
