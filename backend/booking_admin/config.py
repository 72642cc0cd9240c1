from functools import lru_cache
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field


load_dotenv()


class Settings(BaseModel):
    backend_url: str = Field(default="http://localhost:3002/api")
    business_timezone: str = Field(default="Asia/Kuala_Lumpur")
    default_slot_capacity: int = Field(default=15, ge=1)
    http_timeout_seconds: float = Field(default=10.0, gt=0)
    currency: str = Field(default="MYR")
    log_level: str = Field(default="INFO")


@lru_cache
def get_settings() -> Settings:
    defaults = Settings.model_fields
    return Settings(
        backend_url=os.getenv("BACKEND_URL", defaults["backend_url"].default).rstrip("/"),
        business_timezone=os.getenv("BUSINESS_TIMEZONE", defaults["business_timezone"].default),
        default_slot_capacity=int(os.getenv("DEFAULT_SLOT_CAPACITY", defaults["default_slot_capacity"].default)),
        http_timeout_seconds=float(os.getenv("HTTP_TIMEOUT_SECONDS", defaults["http_timeout_seconds"].default)),
        currency=os.getenv("CURRENCY", defaults["currency"].default),
        log_level=os.getenv("LOG_LEVEL", defaults["log_level"].default).upper(),
    )
