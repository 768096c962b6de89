"""Heal application services."""

from .controller import HealController

__all__ = ["HealController"]
