from typing import Optional

from pydantic import field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .secrets_manager import SecretsManager

class Settings(BaseSettings):
    aws_region: str = "us-east-1"
    environment: str = "development"
    log_level: str = "info"
    host: str
    db_username: str
    db_password: SecretStr
    database: str
    port: int = 5432
    # Full SQLAlchemy URL, overrides the discrete connection fields when set
    database_url: Optional[str] = None
    openai_api_key: SecretStr
    openai_model: str = "gpt-4o-mini"
    stream_api_key: str
    stream_api_secret: SecretStr
    stream_token_ttl_seconds: int = 24 * 60 * 60
    firebase_project_id: Optional[str] = None
    custom_token_secret: Optional[SecretStr] = None
    friendship_max_attempts: int = 5
    friendship_retry_max_wait: float = 1.0
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("db_username", "db_password", "openai_api_key", "stream_api_secret", mode="before")
    @classmethod
    def load_secrets(cls, v, info):
        if info.data.get("environment") == "production":
            try:
                secrets = SecretsManager(region_name=info.data.get("aws_region"))
                if info.field_name == "openai_api_key":
                    v = secrets.get_api_key("openai")
                elif info.field_name == "stream_api_secret":
                    v = secrets.get_stream_credentials()["api_secret"]
                elif info.field_name == "db_username":
                    v = secrets.get_db_credentials()["username"]
                elif info.field_name == "db_password":
                    v = secrets.get_db_credentials()["password"]
                return v
            except Exception:
                # If there's an error getting secrets, fall back to the env value
                return v
        return v

    @property
    def sqlalchemy_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+psycopg://{self.db_username}:{self.db_password.get_secret_value()}"
            f"@{self.host}:{self.port}/{self.database}"
        )

settings = Settings()
