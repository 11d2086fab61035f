from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Inventory Tracker"
    ENVIRONMENT: str = "production"

    # "sql" (persistent, SQLAlchemy) or "memory" (volatile, in-process)
    STORAGE_BACKEND: str = "sql"
    DATABASE_URL: str = "sqlite:///./inventory.db"

    # Comma-separated list of allowed origins
    CORS_ORIGINS: str = "*"

    HISTORY_DEFAULT_LIMIT: int = 50

    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env"}

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
