from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")

    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(15, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # Recycle bin / history paging and batch limits
    recycle_bin_default_page_size: int = Field(20, alias="RECYCLE_BIN_DEFAULT_PAGE_SIZE")
    recycle_bin_max_page_size: int = Field(100, alias="RECYCLE_BIN_MAX_PAGE_SIZE")
    recycle_bin_max_restore_batch: int = Field(100, alias="RECYCLE_BIN_MAX_RESTORE_BATCH")
    recycle_bin_max_hard_delete_batch: int = Field(50, alias="RECYCLE_BIN_MAX_HARD_DELETE_BATCH")

    seed_admin_email: Optional[str] = Field(None, alias="SEED_ADMIN_EMAIL")
    seed_admin_password: Optional[str] = Field(None, alias="SEED_ADMIN_PASSWORD")
    seed_admin_name: str = Field("School Admin", alias="SEED_ADMIN_NAME")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
