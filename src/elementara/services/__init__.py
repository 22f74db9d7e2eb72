"""Service layer exports."""

from .errors import FactoryError, ProgressStoreError
from .battle_service import (
    ActionRejectedEvent,
    AftershockEvent,
    AttackResolvedEvent,
    BattleEvent,
    BattleResolvedEvent,
    BattleService,
    CorruptionFadedEvent,
    CorruptionTriggeredEvent,
    CreatureKnockedOutEvent,
    CreatureReplacedEvent,
    DiceRolledEvent,
    EndlessBattleWonEvent,
    EndlessRunEndedEvent,
    EvolvedEvent,
    PacingHintEvent,
    ReplacementRequiredEvent,
    SkipScheduledEvent,
    TaggedOutEvent,
    TurnEndedEvent,
    TurnSkippedEvent,
)
from .opponent_ai import OpponentDecision, decide_opponent_action
from .progress_store import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore
from .progression_service import EndlessProgress, ProgressionService
from .setup_service import CoinTossedEvent, PhaseChangedEvent, RosterSelectionChangedEvent, SetupService

__all__ = [
    "FactoryError",
    "ProgressStoreError",
    "ActionRejectedEvent",
    "AftershockEvent",
    "AttackResolvedEvent",
    "BattleEvent",
    "BattleResolvedEvent",
    "BattleService",
    "CorruptionFadedEvent",
    "CorruptionTriggeredEvent",
    "CreatureKnockedOutEvent",
    "CreatureReplacedEvent",
    "DiceRolledEvent",
    "EndlessBattleWonEvent",
    "EndlessRunEndedEvent",
    "EvolvedEvent",
    "PacingHintEvent",
    "ReplacementRequiredEvent",
    "SkipScheduledEvent",
    "TaggedOutEvent",
    "TurnEndedEvent",
    "TurnSkippedEvent",
    "OpponentDecision",
    "decide_opponent_action",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "EndlessProgress",
    "ProgressionService",
    "CoinTossedEvent",
    "PhaseChangedEvent",
    "RosterSelectionChangedEvent",
    "SetupService",
]
