"""Runtime settings loaded from the environment.

Reads a ``.env`` file at the project root when present, then environment
variables:
- ERP_MODE: "mock" (default) or "live"
- SAFETY_STRICTNESS: "strict", "moderate" (default) or "permissive"
- LOG_LEVEL / LOG_FORMAT: logging level name and "text" or "json"
- API_HOST / API_PORT / API_KEY: HTTP surface
- SAP_BASE_URL / SAP_USERNAME / SAP_PASSWORD / SAP_CLIENT: live gateway
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from dotenv import load_dotenv

env_path = Path(__file__).resolve().parents[1] / ".env"
if env_path.exists():
    load_dotenv(env_path)


VALID_MODES = ("mock", "live")
VALID_STRICTNESS = ("strict", "moderate", "permissive")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class Settings:
    """Process-wide configuration."""
    mode: str = "mock"
    strictness: str = "moderate"
    log_level: str = "INFO"
    log_format: str = "text"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_key: Optional[str] = None
    sap_base_url: Optional[str] = None
    sap_username: Optional[str] = None
    sap_password: Optional[str] = None
    sap_client: Optional[str] = None

    @property
    def is_live(self) -> bool:
        return self.mode == "live"


def _int(value: Optional[str], fallback: int) -> int:
    if value is None or value == "":
        return fallback
    try:
        return int(value)
    except ValueError:
        return fallback


def load_settings(overrides: Optional[Dict[str, str]] = None) -> Settings:
    """Build settings from environment variables.

    Args:
        overrides: Values that take precedence over the environment (tests)
    """
    env = dict(os.environ)
    if overrides:
        env.update(overrides)

    return Settings(
        mode=(env.get("ERP_MODE") or "mock").lower(),
        strictness=(env.get("SAFETY_STRICTNESS") or "moderate").lower(),
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        log_format=(env.get("LOG_FORMAT") or "text").lower(),
        api_host=env.get("API_HOST") or "0.0.0.0",
        api_port=_int(env.get("API_PORT"), 8000),
        api_key=env.get("API_KEY") or None,
        sap_base_url=env.get("SAP_BASE_URL") or None,
        sap_username=env.get("SAP_USERNAME") or None,
        sap_password=env.get("SAP_PASSWORD") or None,
        sap_client=env.get("SAP_CLIENT") or None,
    )


def validate_settings(settings: Settings) -> Tuple[bool, List[str]]:
    """Check settings for a given mode.

    Returns:
        (valid, errors)
    """
    errors: List[str] = []

    if settings.mode not in VALID_MODES:
        errors.append(f"Invalid ERP_MODE: {settings.mode}")
    if settings.strictness not in VALID_STRICTNESS:
        errors.append(f"Invalid SAFETY_STRICTNESS: {settings.strictness}")
    if settings.log_level not in VALID_LOG_LEVELS:
        errors.append(f"Invalid LOG_LEVEL: {settings.log_level}")
    if not 1 <= settings.api_port <= 65535:
        errors.append(f"Invalid API_PORT: {settings.api_port}")

    if settings.is_live:
        if not settings.sap_base_url:
            errors.append("SAP_BASE_URL is required for live mode")
        if not settings.sap_username:
            errors.append("SAP_USERNAME is required for live mode")
        if not settings.sap_password:
            errors.append("SAP_PASSWORD is required for live mode")

    return len(errors) == 0, errors


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the cached process-wide settings."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
