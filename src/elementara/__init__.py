"""Elementara: a dice-driven elemental creature battler engine."""

__version__ = "0.1.0"
