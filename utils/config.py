"""Configuration management for the TFactorTx explorer.

Provides:
- A ``Config`` base with dict/JSON round-tripping
- ``AppConfig``, populated from environment variables with defaults
"""

from pathlib import Path
from typing import Dict, Any
import json
import os as _os


class Config:
    """Base configuration class for organizing application settings."""

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary.

        Returns:
            Dictionary of all config attributes
        """
        return {k: v for k, v in self.__dict__.items() if not k.startswith("_")}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create config from dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            Config instance with values from dictionary
        """
        config = cls()
        for key, value in data.items():
            setattr(config, key, value)
        return config

    def save_json(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2, default=str)

    @classmethod
    def load_json(cls, path: Path) -> "Config":
        """Load configuration from JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            json.JSONDecodeError: If file is not valid JSON
        """
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)


def _env_bool(name: str, default: bool = False) -> bool:
    raw = _os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class AppConfig(Config):
    """Application-level configuration loaded from environment variables.

    All env vars have sensible defaults so the application works out of the
    box without any configuration.

    Environment variables:
        APP_DATA_DIR: Directory holding the overview/master CSVs (default: data)
        APP_DATA_URL: Fetch overview rows from another instance's /api/v1/data
        APP_PORT: Server port (default: 8000)
        APP_HOST: Server bind address (default: 127.0.0.1)
        APP_LOG_FORMAT: Logging format, "text" or "json" (default: text)
        APP_CORS_ORIGINS: Comma-separated allowed origins (default: *)
        APP_DATASET_NAME: Prefix of export filenames (default: TFactorTx)
        APP_SYMBOL_SORT_CASE_SENSITIVE: Case-sensitive text sorting (default: false)
        RATE_LIMIT_CONTACT: Max contact submissions per minute per IP (default: 5)
        RATE_LIMIT_DOWNLOAD: Max export requests per minute per IP (default: 10)
        RATE_LIMIT_DEFAULT: Max requests per minute for other paths (default: 120)
        TRUSTED_PROXIES: Comma-separated proxy IPs to trust for X-Forwarded-For
        RESEND_API_KEY: Mail provider API key; contact is disabled when unset
        RESEND_FROM: Sender address (default: TFactorTx <info@tfactortx.com>)
        CONTACT_TO: Team inbox receiving contact messages (default: info@tfactortx.com)
    """

    def __init__(self) -> None:
        super().__init__()
        self.data_dir = Path(_os.getenv("APP_DATA_DIR", "data"))
        self.data_url: str | None = _os.getenv("APP_DATA_URL") or None
        self.api_port = int(_os.getenv("APP_PORT", "8000"))
        self.api_host = _os.getenv("APP_HOST", "127.0.0.1")
        self.log_format = _os.getenv("APP_LOG_FORMAT", "text")
        raw_origins = _os.getenv("APP_CORS_ORIGINS", "*")
        self.cors_origins: list[str] = (
            ["*"] if raw_origins == "*"
            else [o.strip() for o in raw_origins.split(",") if o.strip()]
        )
        self.dataset_name = _os.getenv("APP_DATASET_NAME", "TFactorTx")
        self.symbol_sort_case_sensitive = _env_bool("APP_SYMBOL_SORT_CASE_SENSITIVE")
        self.rate_limit_contact = int(_os.getenv("RATE_LIMIT_CONTACT", "5"))
        self.rate_limit_download = int(_os.getenv("RATE_LIMIT_DOWNLOAD", "10"))
        self.rate_limit_default = int(_os.getenv("RATE_LIMIT_DEFAULT", "120"))
        raw_proxies = _os.getenv("TRUSTED_PROXIES", "")
        self.trusted_proxies: set[str] = (
            {p.strip() for p in raw_proxies.split(",") if p.strip()}
        )
        self._resend_api_key = _os.getenv("RESEND_API_KEY") or None
        self.resend_from = _os.getenv("RESEND_FROM", "TFactorTx <info@tfactortx.com>")
        self.contact_to = _os.getenv("CONTACT_TO", "info@tfactortx.com")

    @property
    def resend_api_key(self) -> str | None:
        """Kept out of ``to_dict()`` so it never ends up in logs or dumps."""
        return self._resend_api_key

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create an AppConfig instance populated from environment variables."""
        return cls()
