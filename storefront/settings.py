import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


class Settings(BaseModel):
    # Backend API Configuration
    api_base_url: str = Field(
        default="http://192.168.1.235:8000/api", alias="API_BASE_URL"
    )
    api_timeout: float = Field(default=15.0, alias="API_TIMEOUT")
    client_type: str = Field(default="mobile", alias="CLIENT_TYPE")

    # Cache / Retry Configuration
    cache_ttl_seconds: int = Field(default=300, alias="CACHE_TTL_SECONDS")
    max_retries: int = Field(default=2, alias="MAX_RETRIES")
    retry_base_delay: float = Field(default=1.0, alias="RETRY_BASE_DELAY")

    # Connectivity Probe Configuration
    connectivity_timeout: float = Field(default=3.0, alias="CONNECTIVITY_TIMEOUT")
    connectivity_ttl: float = Field(default=5.0, alias="CONNECTIVITY_TTL")

    # Token Store Configuration
    database_url: str = Field(
        default="sqlite+aiosqlite:///./storefront.db", alias="DATABASE_URL"
    )
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    debug: bool = Field(default=False, alias="STOREFRONT_DEBUG")


global_settings = Settings.model_validate(dict(os.environ))
