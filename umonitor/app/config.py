import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

APP_DIR = os.path.dirname(__file__)
ROOT_DIR = os.path.abspath(os.path.join(APP_DIR, "..", ".."))
DEFAULT_CONFIG_PATH = os.path.join(ROOT_DIR, "res", "monitor.yaml")


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class Settings:
    CONFIG_PATH: str = os.getenv("UM_CONFIG_PATH", DEFAULT_CONFIG_PATH)
    LOG_LEVEL: str = os.getenv("UM_LOG_LEVEL", "INFO")

settings = Settings()


@dataclass(frozen=True)
class MonitorConfig:
    status_url: str = "http://localhost:8025/api/status"
    refresh_interval_s: int = 10
    fetch_timeout_s: float = 8.0
    connect_timeout_s: float = 5.0
    online_keywords: Tuple[str, ...] = ("online",)
    offline_keywords: Tuple[str, ...] = ("offline",)
    critical_threshold: int = 3
    title: str = "uMonitor5"
    user_agent: str = "uMonitor5-dashboard/1.0"

    def __post_init__(self):
        if not self.status_url:
            raise ConfigError("status_url must not be empty")
        if isinstance(self.refresh_interval_s, bool) or not isinstance(self.refresh_interval_s, int) \
                or self.refresh_interval_s <= 0:
            raise ConfigError(f"refresh_interval_s must be a positive integer, got {self.refresh_interval_s!r}")
        if self.fetch_timeout_s <= 0 or self.connect_timeout_s <= 0:
            raise ConfigError("timeouts must be positive")
        if self.critical_threshold < 1:
            raise ConfigError("critical_threshold must be >= 1")
        for name in ("online_keywords", "offline_keywords"):
            value = getattr(self, name)
            if isinstance(value, str) or not all(isinstance(k, str) for k in value):
                raise ConfigError(f"{name} must be a list of strings")
            if not all(k.strip() for k in value):
                # an empty keyword is a substring of every state
                raise ConfigError(f"{name} must not contain empty keywords")
            object.__setattr__(self, name, tuple(value))


def _split_env(value: str) -> Tuple[str, ...]:
    return tuple(s.strip() for s in value.split(",") if s.strip())


def load_config(path: str | Path | None = None) -> MonitorConfig:
    """Build the monitor config: env var > YAML file > built-in default."""
    data: Dict[str, Any] = {}
    p = Path(path or settings.CONFIG_PATH)
    if p.exists():
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ConfigError(f"{p}: expected a mapping at the top level")

    keywords = data.get("keywords", {}) or {}
    timeouts = data.get("timeouts", {}) or {}
    defaults = MonitorConfig()

    try:
        return MonitorConfig(
            status_url=os.getenv("UM_STATUS_URL", data.get("status_url", defaults.status_url)),
            refresh_interval_s=int(os.getenv("UM_REFRESH_INTERVAL_S",
                                             data.get("refresh_interval_s", defaults.refresh_interval_s))),
            fetch_timeout_s=float(os.getenv("UM_FETCH_TIMEOUT_S",
                                            timeouts.get("fetch_s", defaults.fetch_timeout_s))),
            connect_timeout_s=float(timeouts.get("connect_s", defaults.connect_timeout_s)),
            online_keywords=_split_env(os.environ["UM_ONLINE_KEYWORDS"]) if "UM_ONLINE_KEYWORDS" in os.environ
            else keywords.get("online", defaults.online_keywords),
            offline_keywords=_split_env(os.environ["UM_OFFLINE_KEYWORDS"]) if "UM_OFFLINE_KEYWORDS" in os.environ
            else keywords.get("offline", defaults.offline_keywords),
            critical_threshold=int(data.get("critical_threshold", defaults.critical_threshold)),
            title=os.getenv("UM_TITLE", data.get("title", defaults.title)),
            user_agent=os.getenv("UM_USER_AGENT", data.get("user_agent", defaults.user_agent)),
        )
    except ConfigError:
        raise
    except (TypeError, ValueError) as e:
        raise ConfigError(f"invalid monitor config in {p}: {e}") from e
