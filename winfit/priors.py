"""
Preference priors for the sizing policy.

A prior suggests previously observed (width, height) fractions for an app in
a context. The solver only reads from it; persistence and learning live with
whoever implements the interface.
"""

from abc import ABC, abstractmethod
from typing import Mapping, Optional

from .types import Archetype


class PreferencePrior(ABC):
    """Abstract supplier of preferred size fractions."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Prior name."""
        pass

    @abstractmethod
    def suggest(
        self,
        app_id: str,
        archetype: Archetype,
        context: str
    ) -> Optional[tuple[float, float]]:
        """
        Suggest a (width, height) fraction pair.

        Args:
            app_id: App identifier.
            archetype: Classified archetype.
            context: Resolved context tag.

        Returns:
            Fractions in (0, 1], or None when there is no preference.
        """
        pass


class StaticPrior(PreferencePrior):
    """
    In-memory prior backed by a read-only mapping.

    Keys are (app, context) pairs; app names are matched case-insensitively
    and a context of "*" matches any context.
    """

    @property
    def name(self) -> str:
        return "static"

    def __init__(self, preferences: Optional[Mapping[tuple[str, str], tuple[float, float]]] = None):
        self._preferences = {
            (app.strip().lower(), context): (float(w), float(h))
            for (app, context), (w, h) in (preferences or {}).items()
        }

    def suggest(
        self,
        app_id: str,
        archetype: Archetype,
        context: str
    ) -> Optional[tuple[float, float]]:
        app = app_id.strip().lower()
        found = self._preferences.get((app, context)) or self._preferences.get((app, "*"))
        if found is None:
            return None
        width, height = found
        if not (0 < width <= 1 and 0 < height <= 1):
            return None
        return found
