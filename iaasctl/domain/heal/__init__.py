"""Heal bounded context."""

from .exceptions import HealerNotFoundError, HealFailedError, ProbeFailedError
from .healer_port import Healer, HealResult

__all__ = ["Healer", "HealResult", "HealerNotFoundError", "HealFailedError", "ProbeFailedError"]
