import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_CATALOG_BASE_URL = "https://api.themoviedb.org/3"
DEFAULT_CATALOG_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w500"


def load_env():
    """Load environment variables from env file.

    Defaults to config/local.env for local development.
    Set ENV_FILE environment variable to override. Variables already present
    in the process environment win over the file.
    """
    env = os.getenv("ENV_FILE", "config/local.env")
    load_dotenv(env)


@dataclass(frozen=True)
class ScheduleSettings:
    """Runtime settings for the schedule service, read from the environment."""

    catalog_base_url: str = DEFAULT_CATALOG_BASE_URL
    catalog_image_base_url: str = DEFAULT_CATALOG_IMAGE_BASE_URL
    catalog_timeout_seconds: float = 10.0
    catalog_rate_limit: int = 35
    enrichment_batch_size: int = 10
    key_prefix: str = "movieclub"
    cors_allow_origin: str = "*"

    @classmethod
    def from_env(cls) -> "ScheduleSettings":
        return cls(
            catalog_base_url=os.getenv("CATALOG_BASE_URL", DEFAULT_CATALOG_BASE_URL).rstrip("/"),
            catalog_image_base_url=os.getenv(
                "CATALOG_IMAGE_BASE_URL", DEFAULT_CATALOG_IMAGE_BASE_URL
            ).rstrip("/"),
            catalog_timeout_seconds=float(os.getenv("CATALOG_TIMEOUT_SECONDS", "10")),
            catalog_rate_limit=int(os.getenv("CATALOG_RATE_LIMIT", "35")),
            enrichment_batch_size=max(1, int(os.getenv("ENRICHMENT_BATCH_SIZE", "10"))),
            key_prefix=os.getenv("SCHEDULE_KEY_PREFIX", "movieclub"),
            cors_allow_origin=os.getenv("CORS_ALLOW_ORIGIN", "*"),
        )
