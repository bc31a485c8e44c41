from typing import Literal, List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import SecretStr, field_validator

OversellPolicy = Literal["clamp", "reject"]

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    APP_NAME: str = "Stall POS API"
    APP_VERSION: str = "1.0.0"
    APP_ENV: Literal["local", "dev", "staging", "prod"] = "local"
    DEBUG: bool = False
    CORS_ORIGINS: str = "*"      # CSV or '*'
    LOG_LEVEL: str = "INFO"

    # Remote document store
    DATABASE_URL: SecretStr = SecretStr("sqlite+aiosqlite:///./stall.db")

    # Inventory
    OVERSELL_POLICY: OversellPolicy = "clamp"   # clamp|reject
    SEED_CATALOG: bool = True

    # Realtime / display
    REALTIME_CHANNEL: str = "stall"
    MISSING_PRODUCT_LABEL: str = "Produto não encontrado"
    CURRENCY: str = "BRL"
    DISPLAY_TIMEZONE: str = "America/Sao_Paulo"

    # -------- validators (presence, format) --------
    @field_validator("DATABASE_URL")
    @classmethod
    def _required_secret(cls, v, info):
        if v is None or (hasattr(v, "get_secret_value") and v.get_secret_value().strip() == ""):
            raise ValueError(f"{info.field_name} is required (set it in .env)")
        return v

    @field_validator("REALTIME_CHANNEL", "MISSING_PRODUCT_LABEL")
    @classmethod
    def _required_plain(cls, v: str, info):
        v = (v or "").strip()
        if not v:
            raise ValueError(f"{info.field_name} must not be empty")
        return v

    @field_validator("OVERSELL_POLICY", mode="before")
    @classmethod
    def _normalize_policy(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @property
    def CORS_ORIGINS_LIST(self) -> List[str]:
        return ["*"] if self.CORS_ORIGINS.strip() == "*" else [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

settings = Settings()
