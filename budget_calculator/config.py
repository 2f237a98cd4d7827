from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./budget_sessions.db"
    COMPANY_NAME: str = "Península"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "*"  # comma-separated

    # Static-site form handler: the page's own path on the hosting site
    FORM_ENDPOINT_URL: str = "http://localhost:8888/"
    FORM_NAME: str = "contact"
    FORM_TIMEOUT_SECONDS: float = 10.0

    class Config:
        env_file = ".env"

    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
