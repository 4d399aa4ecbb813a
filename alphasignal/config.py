# alphasignal/config.py
import os
from dataclasses import dataclass
from dotenv import load_dotenv

from alphasignal.assets import ASSETS
from alphasignal.errors import ConfigurationError

# Loads variables from a local .env file into environment variables (dev only).
load_dotenv()

DEFAULT_RELAY_TEMPLATES = (
    "https://corsproxy.io/?{quoted}",
    "https://api.allorigins.win/raw?url={quoted}",
    "https://thingproxy.freeboard.io/fetch/{url}",
)


@dataclass(frozen=True)
class Settings:
    # App config
    app_env: str
    log_level: str
    default_asset: str
    poll_interval_seconds: float

    # Network
    relay_templates: list[str]
    relay_timeout_seconds: float
    http_timeout_seconds: float

    # Series windows
    window_max: int
    cold_start_window: int
    signal_window: int

    # Signal generator (Gemini)
    gemini_api_key: str
    gemini_model: str
    gemini_base_url: str


def _float_env(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name}={raw!r} is not a number")


def _int_env(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name}={raw!r} is not an integer")


def get_settings() -> Settings:
    """
    Reads env vars and returns a Settings object.

    Bad values fail loudly here, at startup, instead of surfacing later
    as odd refresh behaviour.
    """
    raw_relays = os.getenv("RELAY_TEMPLATES", "")
    relays = [r.strip() for r in raw_relays.split(",") if r.strip()] or list(DEFAULT_RELAY_TEMPLATES)

    settings = Settings(
        app_env=os.getenv("APP_ENV", "local"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        default_asset=os.getenv("DEFAULT_ASSET", "BTCUSD").strip().upper(),
        poll_interval_seconds=_float_env("POLL_INTERVAL_SECONDS", "3"),
        relay_templates=relays,
        relay_timeout_seconds=_float_env("RELAY_TIMEOUT_SECONDS", "5"),
        http_timeout_seconds=_float_env("HTTP_TIMEOUT_SECONDS", "10"),
        window_max=_int_env("WINDOW_MAX", "100"),
        cold_start_window=_int_env("COLD_START_WINDOW", "60"),
        signal_window=_int_env("SIGNAL_WINDOW", "20"),
        gemini_api_key=os.getenv("GEMINI_API_KEY", "").strip(),
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        gemini_base_url=os.getenv(
            "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
        ).rstrip("/"),
    )
    validate_settings(settings)
    return settings


def validate_settings(settings: Settings) -> None:
    if settings.default_asset not in ASSETS:
        raise ConfigurationError(
            f"Unknown DEFAULT_ASSET='{settings.default_asset}'. Expected one of: {', '.join(ASSETS)}"
        )
    if settings.poll_interval_seconds <= 0:
        raise ConfigurationError("POLL_INTERVAL_SECONDS must be positive")
    if settings.relay_timeout_seconds <= 0 or settings.http_timeout_seconds <= 0:
        raise ConfigurationError("timeouts must be positive")
    if settings.window_max < 2 or settings.cold_start_window < 1 or settings.signal_window < 1:
        raise ConfigurationError("window sizes must be positive (WINDOW_MAX >= 2)")
    if settings.cold_start_window > settings.window_max:
        raise ConfigurationError("COLD_START_WINDOW cannot exceed WINDOW_MAX")
    for template in settings.relay_templates:
        if "{url}" not in template and "{quoted}" not in template:
            raise ConfigurationError(f"Relay template has no {{url}}/{{quoted}} placeholder: {template}")
