from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional


class HealthLevel(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    CRITICAL = "critical"
    UNKNOWN = "unknown"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {
    HealthLevel.HEALTHY: 0,
    HealthLevel.DEGRADED: 1,
    HealthLevel.CRITICAL: 2,
    HealthLevel.UNKNOWN: 3,
}


class SortKey(str, Enum):
    STATE = "state"
    NAME = "name"
    TRANSITION = "transition"
    TIME = "time"
    MESSAGE = "message"


class UpDown(str, Enum):
    UP = "up"
    DOWN = "dn"


@dataclass(frozen=True)
class TransitionInfo:
    src: str = ""
    dst: str = ""
    message: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.src} → {self.dst}"


@dataclass(frozen=True)
class TargetRecord:
    name: str
    state: str
    transition: TransitionInfo = field(default_factory=TransitionInfo)
    time: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TargetRecord":
        """Build a record from one upstream JSON object.

        Missing fields are not an error here; the upstream API owns that
        contract, so they fall back to empty values.
        """
        tr = data.get("transition") or {}
        message = tr.get("message") if isinstance(tr, dict) else None
        return cls(
            name=str(data.get("name", "")),
            state=str(data.get("state", "")),
            transition=TransitionInfo(
                src=str(tr.get("src", "")) if isinstance(tr, dict) else "",
                dst=str(tr.get("dst", "")) if isinstance(tr, dict) else "",
                message=message if isinstance(message, str) else None,
            ),
            time=int(data.get("time") or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "state": self.state,
            "time": self.time,
            "transition": {
                "src": self.transition.src,
                "dst": self.transition.dst,
                "message": self.transition.message,
            },
        }


@dataclass(frozen=True)
class DisplayRow:
    record: TargetRecord
    up_or_down: UpDown
    formatted_time: str

    @property
    def transition_label(self) -> str:
        return self.record.transition.label

    def to_dict(self) -> Dict[str, Any]:
        out = self.record.to_dict()
        out["label"] = self.up_or_down.value
        out["formatted_time"] = self.formatted_time
        return out


@dataclass(frozen=True)
class ViewState:
    filter_text: str = ""
    sort_key: SortKey = SortKey.STATE
    ascending: bool = True

    def __post_init__(self):
        # SortKey("bogus") raises ValueError; unknown columns are never defaulted
        object.__setattr__(self, "sort_key", SortKey(self.sort_key))


def apply_filter(state: ViewState, text: str) -> ViewState:
    return replace(state, filter_text=text)


def clear_filter(state: ViewState) -> ViewState:
    return replace(state, filter_text="")


def toggle_sort(state: ViewState, key: SortKey | str) -> ViewState:
    """Same column flips the direction, a new column starts ascending."""
    key = SortKey(key)
    if key == state.sort_key:
        return replace(state, ascending=not state.ascending)
    return replace(state, sort_key=key, ascending=True)


def parse_records(payload: List[Any]) -> List[TargetRecord]:
    out = []
    for item in payload:
        if not isinstance(item, dict):
            raise TypeError(f"expected a target object, got {type(item).__name__}")
        out.append(TargetRecord.from_dict(item))
    return out
