"""Signal records produced by the simulator for rendering collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SignalKind(str, Enum):
    BUY = "buy"
    SELL = "sell"


@dataclass(slots=True, frozen=True)
class Signal:
    """Chart marker for a position transition or, with ``is_trigger``, a raw predicate hit."""

    time: int
    kind: SignalKind
    price: float
    is_trigger: bool = False
    label: str = ""

    def text(self) -> str:
        if self.label:
            return self.label
        return self.kind.value.upper()
