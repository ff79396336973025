# medcare/core/config.py
import os
from pydantic_settings import BaseSettings
from pydantic import Field
from pydantic_settings import SettingsConfigDict
from typing import List
from functools import lru_cache

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True)

    # Application Settings
    APP_NAME: str = "Medical Care API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    DOCS_ENABLED: bool = True

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = int(os.environ.get("PORT", 3000))

    # Database Settings
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "sqlite:///./medcare.db")

    # Security Settings
    SECRET_KEY: str = Field(default="change-me-in-prod", alias="JWT_SECRET_KEY")
    ALGORITHM: str = "HS256"
    # Single lifetime for tokens minted at login and at registration
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 24 * 60
    PASSWORD_RESET_EXPIRE_MINUTES: int = 60
    BCRYPT_ROUNDS: int = 12
    ALLOW_ADMIN_REGISTRATION: bool = False

    # CORS Settings
    ALLOWED_ORIGINS: str = os.environ.get("ALLOWED_ORIGINS", "*")
    ALLOWED_METHODS: str = os.environ.get("ALLOWED_METHODS", "GET,POST,PUT,DELETE,PATCH")
    ALLOWED_HEADERS: str = os.environ.get("ALLOWED_HEADERS", "Content-Type,Authorization")

    # Request limits
    MAX_REQUEST_SIZE: int = 10 * 1024 * 1024  # 10MB
    GZIP_MIN_SIZE: int = 500

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_WINDOW_SEC: int = 15 * 60
    RATE_LIMIT_MAX_REQUESTS: int = 100

    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_ORIGINS)

    @property
    def allowed_methods_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_METHODS)

    @property
    def allowed_headers_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_HEADERS)

    @property
    def secret_key_configured(self) -> bool:
        return bool(self.SECRET_KEY and self.SECRET_KEY != "change-me-in-prod")

@lru_cache()
def get_settings() -> Settings:
    s = Settings()
    cors_env = os.environ.get("CORS_ORIGINS")
    if cors_env:
        s.ALLOWED_ORIGINS = cors_env
    return s

settings: Settings = get_settings()
