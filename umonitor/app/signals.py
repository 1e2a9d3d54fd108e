"""Page-level health signals: favicon colour and title decoration."""
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from .models import HealthLevel


class IconVariant(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    GREY = "grey"


class TitleVariant(str, Enum):
    PLAIN = ""
    ONE_MARK = "(!)"
    THREE_MARK = "(!!!)"
    QUESTION_MARK = "(???)"


@dataclass(frozen=True)
class AmbientSignal:
    icon: IconVariant
    title: TitleVariant


SIGNALS = {
    HealthLevel.HEALTHY: AmbientSignal(IconVariant.GREEN, TitleVariant.PLAIN),
    HealthLevel.DEGRADED: AmbientSignal(IconVariant.YELLOW, TitleVariant.ONE_MARK),
    HealthLevel.CRITICAL: AmbientSignal(IconVariant.RED, TitleVariant.THREE_MARK),
    HealthLevel.UNKNOWN: AmbientSignal(IconVariant.GREY, TitleVariant.QUESTION_MARK),
}


def signal_for(level: HealthLevel) -> AmbientSignal:
    # KeyError on a level without a mapping; there is no fallback colour
    return SIGNALS[HealthLevel(level)]


def title_text(base: str, variant: TitleVariant) -> str:
    return f"{base} {variant.value}" if variant.value else base


def icon_href(variant: IconVariant) -> str:
    return f"/icon/{variant.value}.svg"


_FILLS = {
    IconVariant.GREEN: "#10b981",
    IconVariant.YELLOW: "#f59e0b",
    IconVariant.RED: "#ef4444",
    IconVariant.GREY: "#6b7280",
}


def icon_svg(variant: IconVariant) -> str:
    return (
        '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 16 16">'
        f'<circle cx="8" cy="8" r="7" fill="{_FILLS[variant]}"/></svg>'
    )


class AmbientSignalAdapter(Protocol):
    def apply(self, signal: AmbientSignal) -> None: ...


class PageSignals:
    """In-memory adapter: holds the signal the next page render will show."""

    def __init__(self, base_title: str):
        self.base_title = base_title
        self.signal = SIGNALS[HealthLevel.HEALTHY]
        self.changed_at: Optional[float] = None

    def apply(self, signal: AmbientSignal) -> None:
        if signal != self.signal:
            self.changed_at = time.time()
        self.signal = signal

    @property
    def title(self) -> str:
        return title_text(self.base_title, self.signal.title)

    @property
    def icon(self) -> str:
        return icon_href(self.signal.icon)
