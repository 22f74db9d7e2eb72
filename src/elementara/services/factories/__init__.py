"""Factory helpers for runtime entities."""

from .creature_factory import create_creature_instance, create_roster
from .id_factory import make_instance_id

__all__ = [
    "create_creature_instance",
    "create_roster",
    "make_instance_id",
]
