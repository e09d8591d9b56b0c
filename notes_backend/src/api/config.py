from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Folder Notes API"
    API_V1_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./notes.db"
    DATABASE_ECHO: bool = False

    # JWT
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440
    PASSWORD_HASH_ROUNDS: int = 12

    # Auth cookie, carries the same token as the bearer header
    AUTH_COOKIE_NAME: str = "token"
    AUTH_COOKIE_SECURE: bool = False

    # CORS
    FRONTEND_ORIGIN: str = "http://localhost:3000"

    # Folder defaults
    FOLDER_DEFAULT_COLOR: str = "#6366f1"
    FOLDER_DEFAULT_DESCRIPTION: str = ""

    # Note limits
    NOTE_TITLE_MAX_LENGTH: int = 100
    NOTE_CONTENT_MAX_LENGTH: int = 100000

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.FRONTEND_ORIGIN.split(",") if origin.strip()]

    @property
    def access_token_max_age(self) -> int:
        return self.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
