import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

from exceptions.custom_exceptions import ConfigurationException

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Process configuration, read once from the environment."""

    pipedream_client_id: str
    pipedream_client_secret: str
    pipedream_project_id: str
    pipedream_environment: str = "development"
    pipedream_api_url: str = "https://api.pipedream.com"

    # Connect proxy target that injects the developer token for Google Ads
    google_ads_proxy_url: str = "https://googleads.m.pipedream.net"
    google_ads_api_version: str = "v19"

    exchange_rate_api_url: str = "https://open.er-api.com/v6/latest/USD"

    batch_job_poll_interval_ms: int = 2000
    batch_job_max_poll_attempts: int = 10

    port: int = 3000

    def validate(self) -> None:
        missing = [
            name
            for name, value in (
                ("PIPEDREAM_CLIENT_ID", self.pipedream_client_id),
                ("PIPEDREAM_CLIENT_SECRET", self.pipedream_client_secret),
                ("PIPEDREAM_PROJECT_ID", self.pipedream_project_id),
            )
            if not value
        ]
        if missing:
            raise ConfigurationException(
                f"Missing required environment variable(s): {', '.join(missing)}",
                details={"missing": missing},
            )


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationException(
            f"{name} must be an integer", details={"value": raw}
        )


def load_settings() -> Settings:
    return Settings(
        pipedream_client_id=os.getenv("PIPEDREAM_CLIENT_ID", ""),
        pipedream_client_secret=os.getenv("PIPEDREAM_CLIENT_SECRET", ""),
        pipedream_project_id=os.getenv("PIPEDREAM_PROJECT_ID", ""),
        pipedream_environment=os.getenv("PIPEDREAM_PROJECT_ENVIRONMENT", "development"),
        pipedream_api_url=os.getenv("PIPEDREAM_API_URL", "https://api.pipedream.com"),
        google_ads_proxy_url=os.getenv(
            "GOOGLE_ADS_PROXY_URL", "https://googleads.m.pipedream.net"
        ),
        google_ads_api_version=os.getenv("GOOGLE_ADS_API_VERSION", "v19"),
        exchange_rate_api_url=os.getenv(
            "EXCHANGE_RATE_API_URL", "https://open.er-api.com/v6/latest/USD"
        ),
        batch_job_poll_interval_ms=_int_env("BATCH_JOB_POLL_INTERVAL_MS", 2000),
        batch_job_max_poll_attempts=_int_env("BATCH_JOB_MAX_POLL_ATTEMPTS", 10),
        port=_int_env("PORT", 3000),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
