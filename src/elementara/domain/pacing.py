"""Presentation delays between battle steps.

Game outcomes never depend on these numbers. The battle service emits them
as hints in its event stream so a renderer can replay a roll at the pace of
the table-top animation, or skip straight to the result.
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Literal

PacingMode = Literal["animated", "instant"]


@dataclass(frozen=True, slots=True)
class BattlePacing:
    """Delays in milliseconds, keyed by the step they precede."""

    dice_reveal: int = 1000
    attack_impact: int = 500
    turn_advance: int = 300
    win_check_settle: int = 50
    evolution: int = 1500
    tag_out: int = 1000
    replacement: int = 100
    aftershock: int = 1000
    aftershock_win_check: int = 500
    opponent_think: int = 1000
    opponent_action: int = 500
    coin_toss: int = 2000
    coin_result: int = 3000

    @classmethod
    def from_mode(cls, mode: str) -> "BattlePacing":
        if mode == "instant":
            return cls(**{item.name: 0 for item in fields(cls)})
        return cls()

    def delay_for(self, step: str) -> int:
        return getattr(self, step)
