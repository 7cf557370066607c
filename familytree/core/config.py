from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FAMILYTREE_", env_file=".env", extra="ignore")
    DATABASE_URL: str = "sqlite:///./familytree.db"

    # Identity tokens come from an external provider. With a JWKS url the
    # signing keys are fetched from it, otherwise IDENTITY_SECRET is used.
    IDENTITY_SECRET: str = "change-me"
    IDENTITY_ALGORITHMS: list[str] = ["HS256"]
    IDENTITY_JWKS_URL: str | None = None
    IDENTITY_AUDIENCE: str | None = None
    IDENTITY_ISSUER: str | None = None

    CORS_ORIGINS: list[str] = ["*"]
    LOG_LEVEL: str = "INFO"
settings = Settings()
