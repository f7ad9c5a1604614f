"""Configuration loader for wgscraper."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, NonNegativeFloat, NonNegativeInt


class AppInfo(BaseModel):
    """Application metadata."""

    name: str = "wgscraper"
    version: str = "0.1.0"


class SiteConfig(BaseModel):
    """Target site configuration."""

    base_url: str = "https://www.wg-gesucht.de/"
    # og:image carries this URL when an ad has no photos
    placeholder_image_url: str = "https://img.wg-gesucht.de/"


class RetryPolicy(BaseModel):
    """What the fetcher does after a challenge page.

    ``max_retries=None`` retries forever, rotating identity on every
    challenge. A number bounds the retries and makes the fetcher return a
    blocked result once they are used up.
    """

    max_retries: NonNegativeInt | None = None
    backoff_seconds: NonNegativeFloat = 0.0

    @classmethod
    def bounded(cls, max_retries: int, backoff_seconds: float = 0.0) -> "RetryPolicy":
        return cls(max_retries=max_retries, backoff_seconds=backoff_seconds)

    @classmethod
    def unbounded(cls) -> "RetryPolicy":
        return cls(max_retries=None, backoff_seconds=0.0)

    @property
    def is_bounded(self) -> bool:
        return self.max_retries is not None

    def allows_retry(self, retries_done: int) -> bool:
        """Whether another retry is allowed after ``retries_done`` retries."""
        return self.max_retries is None or retries_done < self.max_retries


class FetcherConfig(BaseModel):
    """Resilient fetcher configuration."""

    retry: RetryPolicy = Field(default_factory=RetryPolicy)
    challenge_selector: str = (
        "#captcha_form, .g-recaptcha, .h-captcha, #challenge-form"
    )
    timeout_seconds: float = 30.0
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:87.0) "
        "Gecko/20100101 Firefox/87.0"
    )


class TorConfig(BaseModel):
    """Tor proxy and control port configuration."""

    enabled: bool = False
    socks_host: str = "127.0.0.1"
    socks_port: int = 9050
    control_port: int = 9051

    @property
    def proxy_url(self) -> str:
        return f"socks5://{self.socks_host}:{self.socks_port}"


class AppConfig(BaseModel):
    """Root application configuration."""

    app: AppInfo = Field(default_factory=AppInfo)
    site: SiteConfig = Field(default_factory=SiteConfig)
    fetcher: FetcherConfig = Field(default_factory=FetcherConfig)
    tor: TorConfig = Field(default_factory=TorConfig)

    # Tor control port password loaded from environment
    tor_password: str | None = None


def load_config(config_path: str | Path = "config.yaml") -> AppConfig:
    """Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Fully populated AppConfig instance.
    """
    load_dotenv()

    yaml_data: dict = {}
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file) as f:
            yaml_data = yaml.safe_load(f) or {}

    config = AppConfig(**yaml_data)

    # Override the control port password from environment
    config.tor_password = os.getenv("TOR_PASSWORD")

    return config
