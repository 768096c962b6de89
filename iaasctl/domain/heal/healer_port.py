"""Domain port for healers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


class Healer(ABC):
    """A probe paired with a remediation.

    ``needs_heal`` must be a short, side-effect-free inspection. ``heal``
    checks ``needs_heal`` itself and runs the remediation only when it returned
    True; it reports whether the remediation ran and raises on failure.
    """

    @abstractmethod
    def needs_heal(self, context=None) -> bool:
        """Return True when the remediation should run."""

    @abstractmethod
    def heal(self, context=None) -> bool:
        """Run the remediation if needed. Returns True when it ran."""


@dataclass(frozen=True)
class HealResult:
    """Outcome of one controller run of a healer."""
    name: str
    healed: bool

    def to_dict(self):
        return {"name": self.name, "healed": self.healed}
