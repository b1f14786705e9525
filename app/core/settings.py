from typing import Dict, Literal, List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import SecretStr, field_validator


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_default=True,
    )

    # App
    APP_NAME: str = "Marsos API"
    APP_VERSION: str = "1.0.0"
    APP_ENV: Literal["local", "dev", "staging", "prod"] = "local"
    DEBUG: bool = False
    API_PREFIX: str = "/api"
    CORS_ORIGINS: str = "*"      # CSV o '*'
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # DB (documento de proveedor)
    DATABASE_URL: SecretStr = SecretStr("")
    DB_SSL: bool = True
    DB_CREATE_TABLES: bool = False

    # Supabase Auth (identidades)
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: SecretStr = SecretStr("")
    IDENTITY_PAGE_SIZE: int = 200
    IDENTITY_TIMEOUT_SEC: int = 15

    # R2 (archivos)
    CF_ACCOUNT_ID: str = ""
    R2_ACCESS_KEY_ID: SecretStr = SecretStr("")
    R2_SECRET_ACCESS_KEY: SecretStr = SecretStr("")
    R2_BUCKET: str = "marsos-suppliers"
    R2_PREFIX: str = ""
    MEDIA_PUBLIC_BASE: str = ""

    # Uploads
    UPLOAD_MAX_MB: int = 10

    # -------- validators (presencia, formato) --------
    @field_validator("DATABASE_URL", "SUPABASE_SERVICE_ROLE_KEY", "R2_ACCESS_KEY_ID", "R2_SECRET_ACCESS_KEY")
    @classmethod
    def _required_secret(cls, v, info):
        if v is None or (hasattr(v, "get_secret_value") and v.get_secret_value() == ""):
            raise ValueError(f"{info.field_name} is required (set it in .env)")
        return v

    @field_validator("SUPABASE_URL", "CF_ACCOUNT_ID", "R2_BUCKET", "MEDIA_PUBLIC_BASE")
    @classmethod
    def _required_plain(cls, v, info):
        if not v:
            raise ValueError(f"{info.field_name} is required (set it in .env)")
        return v

    @field_validator("R2_PREFIX")
    @classmethod
    def _normalize_prefix(cls, v: str) -> str:
        return (v or "").strip().strip("/")

    @field_validator("SUPABASE_URL", "MEDIA_PUBLIC_BASE")
    @classmethod
    def _normalize_base(cls, v: str) -> str:
        return v.strip().rstrip("/")

    @field_validator("API_PREFIX")
    @classmethod
    def _normalize_api_prefix(cls, v: str) -> str:
        v = (v or "").strip().rstrip("/")
        return v if not v or v.startswith("/") else f"/{v}"

    @field_validator("IDENTITY_PAGE_SIZE", "IDENTITY_TIMEOUT_SEC", "UPLOAD_MAX_MB", "PORT")
    @classmethod
    def _positive(cls, v: int, info):
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v

    @property
    def CORS_ORIGINS_LIST(self) -> List[str]:
        return ["*"] if self.CORS_ORIGINS.strip() == "*" else [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def R2_S3_ENDPOINT(self) -> str:
        return f"https://{self.CF_ACCOUNT_ID}.r2.cloudflarestorage.com"

    @property
    def SUPABASE_ADMIN_HEADERS(self) -> Dict[str, str]:
        key = self.SUPABASE_SERVICE_ROLE_KEY.get_secret_value()
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        }

    @property
    def UPLOAD_MAX_BYTES(self) -> int:
        return self.UPLOAD_MAX_MB * 1024 * 1024

settings = Settings()
