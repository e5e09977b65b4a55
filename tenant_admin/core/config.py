# tenant_admin/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # tell pydantic-settings which .env file to load
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # admin operator store
    MONGO_URI: str = "mongodb://localhost:27017"
    MASTER_DB: str = "tenant_admin_db"
    JWT_SECRET: str = "secret_jwt_key"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # remote JSON-API service holding tenant data
    HUB_API_URL: str = "http://localhost:3000/api/v2"
    HUB_API_KEY: str = ""
    HUB_API_SECRET: str = ""
    HUB_TIMEOUT_SECONDS: float = 30.0

    SUPPORT_ENABLED: bool = False
    LOG_LEVEL: str = "INFO"

settings = Settings()
