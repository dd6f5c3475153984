from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = Field(default="development", validation_alias="APP_ENV")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    redis_url: str = Field(
        default="redis://localhost:6379/0",
        validation_alias="REDIS_URL",
    )

    cors_allow_origins: str = Field(default="http://localhost:3000", validation_alias="CORS_ALLOW_ORIGINS")

    library_key: str = Field(default="my_quizzes", validation_alias="LIBRARY_KEY")

    share_key_compression_level: int = Field(default=-1, validation_alias="SHARE_KEY_COMPRESSION_LEVEL")
    share_key_chunk_size: int = Field(default=16 * 1024, validation_alias="SHARE_KEY_CHUNK_SIZE")

    @field_validator("share_key_compression_level")
    @classmethod
    def _check_level(cls, v: int) -> int:
        if v < -1 or v > 9:
            raise ValueError("SHARE_KEY_COMPRESSION_LEVEL must be between -1 and 9")
        return v

    @field_validator("share_key_chunk_size")
    @classmethod
    def _check_chunk(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("SHARE_KEY_CHUNK_SIZE must be positive")
        return v


settings = Settings()


def _is_prod() -> bool:
    return (settings.app_env or "").strip().lower() in {"prod", "production"}


if _is_prod():
    if settings.redis_url.strip() == "redis://localhost:6379/0":
        raise RuntimeError("REDIS_URL must be set in production")
    if "*" in [o.strip() for o in str(settings.cors_allow_origins or "").split(",")]:
        raise RuntimeError("CORS_ALLOW_ORIGINS must not include '*' in production")
