from dataclasses import dataclass
from typing import Iterable, Sequence

from .config import MonitorConfig
from .models import HealthLevel, TargetRecord


@dataclass(frozen=True)
class StateCounts:
    online: int = 0
    offline: int = 0
    unknown: int = 0

    def to_dict(self):
        return {"online": self.online, "offline": self.offline, "unknown": self.unknown}


def _contains_any(state: str, keywords: Iterable[str]) -> bool:
    return any(k.lower() in state for k in keywords)


def partition(records: Sequence[TargetRecord], config: MonitorConfig) -> StateCounts:
    """Count records whose state matches an online keyword, else an offline one, else neither."""
    online = offline = unknown = 0
    for rec in records:
        state = rec.state.lower()
        if _contains_any(state, config.online_keywords):
            online += 1
        elif _contains_any(state, config.offline_keywords):
            offline += 1
        else:
            unknown += 1
    return StateCounts(online, offline, unknown)


def level_for(counts: StateCounts, config: MonitorConfig) -> HealthLevel:
    # unknown targets are deliberately not part of the decision
    if counts.offline == 0:
        return HealthLevel.HEALTHY
    if counts.offline < config.critical_threshold:
        return HealthLevel.DEGRADED
    return HealthLevel.CRITICAL


def classify(records: Sequence[TargetRecord], config: MonitorConfig) -> HealthLevel:
    return level_for(partition(records, config), config)
