"""
Configuration for pyGrowatt

All tunables have defaults and can be overridden from the environment. The
command line loads a .env file first (python-dotenv), then reads:

    GROWATT_API_URL         - Open/mobile API base (default: "https://openapi.growatt.com")
    GROWATT_WEB_URL         - Web panel base (default: "https://server.growatt.com")
    GROWATT_TIMEOUT         - Seconds per endpoint attempt (default: 10)
    GROWATT_RUN_TIMEOUT     - Overall deadline for one acquisition run (default: 60)
    GROWATT_MAX_WORKERS     - Plants processed concurrently (default: 8)
    GROWATT_DEVICE_WORKERS  - Devices processed concurrently per plant (default: 4)
    GROWATT_POOL_MAXSIZE    - HTTP connection pool size (default: 10)
    GROWATT_TIMEZONE        - Timezone for lastUpdate (default: "America/Mexico_City")
    GROWATT_USER_AGENT      - User-Agent header (default: "pyGrowatt/<version>")
    GROWATT_DEBUG           - Enable debug logging "yes"/"no" (default: "no")
"""
import logging
import os
from dataclasses import dataclass, field, replace

log = logging.getLogger(__name__)

DEFAULT_API_URL = "https://openapi.growatt.com"
DEFAULT_WEB_URL = "https://server.growatt.com"
DEFAULT_TIMEZONE = "America/Mexico_City"


def _default_user_agent() -> str:
    from pygrowatt import __version__
    return "pyGrowatt/%s" % __version__


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        log.debug(f"Invalid value for {name} ({raw!r}) - using default {default}")
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        log.debug(f"Invalid value for {name} ({raw!r}) - using default {default}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("yes", "true", "1", "on")


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    web_url: str = DEFAULT_WEB_URL
    timeout: float = 10.0       # per endpoint attempt
    run_timeout: float = 60.0   # whole acquisition run
    max_workers: int = 8
    device_workers: int = 4
    pool_maxsize: int = 10
    timezone: str = DEFAULT_TIMEZONE
    user_agent: str = field(default_factory=_default_user_agent)
    debug: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'api_url', self.api_url.rstrip('/'))
        object.__setattr__(self, 'web_url', self.web_url.rstrip('/'))
        if self.max_workers < 1:
            object.__setattr__(self, 'max_workers', 1)
        if self.device_workers < 1:
            object.__setattr__(self, 'device_workers', 1)

    @classmethod
    def from_env(cls, **overrides) -> "Settings":
        settings = cls(
            api_url=os.getenv("GROWATT_API_URL", DEFAULT_API_URL),
            web_url=os.getenv("GROWATT_WEB_URL", DEFAULT_WEB_URL),
            timeout=_env_float("GROWATT_TIMEOUT", 10.0),
            run_timeout=_env_float("GROWATT_RUN_TIMEOUT", 60.0),
            max_workers=_env_int("GROWATT_MAX_WORKERS", 8),
            device_workers=_env_int("GROWATT_DEVICE_WORKERS", 4),
            pool_maxsize=_env_int("GROWATT_POOL_MAXSIZE", 10),
            timezone=os.getenv("GROWATT_TIMEZONE", DEFAULT_TIMEZONE),
            user_agent=os.getenv("GROWATT_USER_AGENT") or _default_user_agent(),
            debug=_env_bool("GROWATT_DEBUG", False),
        )
        overrides = {k: v for k, v in overrides.items() if v is not None}
        if overrides:
            settings = replace(settings, **overrides)
        return settings
