# bazar/settings.py
from __future__ import annotations
from decimal import Decimal
from typing import List, Optional
from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict
import json
import os

def _parse_cors(v: Optional[str | List[str]]) -> List[str]:
    """
    Accept JSON array (e.g. '["http://localhost:3000"]') or
    comma-separated string ('http://localhost:3000,http://127.0.0.1:3000').
    """
    if v is None:
        return ["http://localhost:3000", "http://127.0.0.1:3000"]
    if isinstance(v, list):
        return v
    s = v.strip()
    if not s:
        return ["http://localhost:3000", "http://127.0.0.1:3000"]
    # try JSON first
    try:
        parsed = json.loads(s)
    except ValueError:
        parsed = None
    if isinstance(parsed, list) and all(isinstance(x, str) for x in parsed):
        return parsed
    # fallback: comma separated
    return [p.strip() for p in s.split(",") if p.strip()]

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",   # ignore unknown env keys instead of raising
    )

    # --- API ---
    api_host: str = Field(default="127.0.0.1", validation_alias=AliasChoices("API_HOST",))
    api_port: int = Field(default=8000,        validation_alias=AliasChoices("API_PORT",))
    cors_origins_raw: Optional[str | List[str]] = Field(
        default=None, validation_alias=AliasChoices("CORS_ORIGINS",)
    )
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL",))

    # --- Postgres ---
    database_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("DATABASE_URL",)
    )
    db_pool_min: int = Field(default=2,  validation_alias=AliasChoices("DB_POOL_MIN",))
    db_pool_max: int = Field(default=10, validation_alias=AliasChoices("DB_POOL_MAX",))

    # --- Identity (bearer JWT issued by the auth provider) ---
    # accept either AUTH_JWT_SECRET or SUPABASE_JWT_SECRET
    auth_jwt_secret: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("AUTH_JWT_SECRET", "SUPABASE_JWT_SECRET")
    )
    auth_jwt_algorithm: str = Field(
        default="HS256", validation_alias=AliasChoices("AUTH_JWT_ALGORITHM",)
    )
    auth_jwt_audience: Optional[str] = Field(
        default="authenticated", validation_alias=AliasChoices("AUTH_JWT_AUDIENCE",)
    )

    # --- Firebase (product image storage) ---
    firebase_project_id: str = Field(
        default="lih-bazar",
        validation_alias=AliasChoices("FIREBASE_PROJECT_ID",)
    )
    google_application_credentials: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GOOGLE_APPLICATION_CREDENTIALS",)
    )
    firebase_storage_bucket: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("FIREBASE_STORAGE_BUCKET",)
    )
    images_bucket: str = Field(default="images", validation_alias=AliasChoices("IMAGES_BUCKET",))

    # --- Cart / checkout ---
    cart_cookie_name: str = Field(
        default="bazar_cart", validation_alias=AliasChoices("CART_COOKIE_NAME",)
    )
    continuous_unit_step: Decimal = Field(
        default=Decimal("0.1"), gt=0,
        validation_alias=AliasChoices("CONTINUOUS_UNIT_STEP",)
    )
    seller_whatsapp_number: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("SELLER_WHATSAPP_NUMBER",)
    )
    currency: str = Field(default="FCFA", validation_alias=AliasChoices("CURRENCY",))

    @property
    def cors_origins(self) -> List[str]:
        return _parse_cors(self.cors_origins_raw)

# singleton
settings = Settings()

# Make sure GOOGLE_APPLICATION_CREDENTIALS is exported for firebase_admin
if settings.google_application_credentials:
    os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = settings.google_application_credentials
