from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import BreakKind, Phase
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class EmployeeState:
    """Closed attendance state: a phase, plus the break kind while on break."""

    phase: Phase
    break_kind: Optional[BreakKind] = None

    def __post_init__(self):
        if (self.phase == Phase.ON_BREAK) != (self.break_kind is not None):
            raise ValueError("break_kind is required for ON_BREAK and forbidden otherwise")

    @classmethod
    def clocked_out(cls) -> "EmployeeState":
        return cls(Phase.CLOCKED_OUT)

    @classmethod
    def working(cls) -> "EmployeeState":
        return cls(Phase.WORKING)

    @classmethod
    def standby(cls) -> "EmployeeState":
        return cls(Phase.STANDBY)

    @classmethod
    def working_idle(cls) -> "EmployeeState":
        return cls(Phase.WORKING_IDLE)

    @classmethod
    def on_break(cls, kind: BreakKind) -> "EmployeeState":
        return cls(Phase.ON_BREAK, BreakKind.parse(kind))

    @classmethod
    def from_label(cls, label: Optional[str]) -> "EmployeeState":
        """Parse the stored status label. A missing label means clocked out."""

        if not label or label == Phase.CLOCKED_OUT.value:
            return cls.clocked_out()
        try:
            return cls.on_break(BreakKind.parse(label))
        except ValueError:
            pass
        try:
            phase = Phase(label)
        except ValueError:
            raise ValidationError(f"Unknown status: {label!r}") from None
        if phase == Phase.ON_BREAK:
            raise ValidationError("Break status must name the break kind")
        return cls(phase)

    @property
    def label(self) -> str:
        if self.break_kind is not None:
            return self.break_kind.value
        return self.phase.value

    @property
    def is_clocked_in(self) -> bool:
        return self.phase != Phase.CLOCKED_OUT

    @property
    def is_on_break(self) -> bool:
        return self.phase == Phase.ON_BREAK

    def __str__(self) -> str:
        return self.label
