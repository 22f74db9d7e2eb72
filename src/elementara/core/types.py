"""Shared type aliases for the core and domain layers."""
from typing import Literal, Tuple

Side = Literal["player", "opponent"]
Element = Literal["Fire", "Water", "Earth", "Air"]
CoinFace = Literal["Heads", "Tails"]

GamePhase = Literal[
    "setup",
    "modeSelection",
    "creatureSelection",
    "instructions",
    "coinToss",
    "inGame",
    "gameOver",
]

SelectionSubPhase = Literal[
    "chooseElement",
    "chooseCreature",
    "chooseSpecificCreatureForSet2",
    "chooseChallengeType",
]

ELEMENTS: Tuple[Element, ...] = ("Fire", "Water", "Earth", "Air")
STAGES: Tuple[int, ...] = (1, 2, 3)


def other_side(side: Side) -> Side:
    """Return the side that is not ``side``."""
    return "opponent" if side == "player" else "player"


__all__ = [
    "CoinFace",
    "ELEMENTS",
    "Element",
    "GamePhase",
    "STAGES",
    "SelectionSubPhase",
    "Side",
    "other_side",
]
