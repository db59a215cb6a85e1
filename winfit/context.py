"""
Winfit context and focus resolver.

Extracts a semantic context tag from free-text intent and picks the window
that should hold focus.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from .errors import InvalidInputError
from .types import Archetype

_A = Archetype

GENERAL = "general"

# First matching rule wins.
CONTEXT_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("cod", "develop", "program", "debug"), "coding"),
    (("design", "creat", "draw", "sketch"), "design"),
    (("research", "read", "study", "browse"), "research"),
    (("meet", "call", "video"), "meeting"),
    (("write", "writing", "draft", "essay"), "writing"),
)

PRIORITY_TABLES: Mapping[str, Mapping[Archetype, int]] = MappingProxyType({
    "coding": MappingProxyType({
        _A.CODE_WORKSPACE: 100,
        _A.TEXT_STREAM: 80,
        _A.CONTENT_CANVAS: 60,
        _A.GLANCEABLE_MONITOR: 20,
        _A.UNKNOWN: 10,
    }),
    "design": MappingProxyType({
        _A.CONTENT_CANVAS: 100,
        _A.CODE_WORKSPACE: 50,
        _A.TEXT_STREAM: 40,
        _A.GLANCEABLE_MONITOR: 20,
        _A.UNKNOWN: 10,
    }),
    "research": MappingProxyType({
        _A.CONTENT_CANVAS: 100,
        _A.TEXT_STREAM: 60,
        _A.CODE_WORKSPACE: 50,
        _A.GLANCEABLE_MONITOR: 20,
        _A.UNKNOWN: 10,
    }),
    "meeting": MappingProxyType({
        _A.TEXT_STREAM: 100,
        _A.CONTENT_CANVAS: 70,
        _A.CODE_WORKSPACE: 40,
        _A.GLANCEABLE_MONITOR: 20,
        _A.UNKNOWN: 10,
    }),
    "writing": MappingProxyType({
        _A.CONTENT_CANVAS: 100,
        _A.CODE_WORKSPACE: 70,
        _A.TEXT_STREAM: 50,
        _A.GLANCEABLE_MONITOR: 20,
        _A.UNKNOWN: 10,
    }),
    GENERAL: MappingProxyType({
        _A.CODE_WORKSPACE: 90,
        _A.CONTENT_CANVAS: 80,
        _A.TEXT_STREAM: 60,
        _A.GLANCEABLE_MONITOR: 20,
        _A.UNKNOWN: 10,
    }),
})


@dataclass(frozen=True)
class ContextResolution:
    """Resolved context tag and focus."""

    context: str
    focused_app: str
    source: str  # "explicit" or "ranked"


class ContextResolver:
    """Resolves context tags and focus targets."""

    def __init__(
        self,
        rules: Sequence[tuple[tuple[str, ...], str]] = CONTEXT_RULES,
        priority_tables: Mapping[str, Mapping[Archetype, int]] = PRIORITY_TABLES
    ):
        self.rules = tuple(rules)
        self.priority_tables = priority_tables

    def extract_context(self, text: str) -> str:
        """Map free text to a context tag."""
        normalized = (text or "").lower()
        for keywords, tag in self.rules:
            if any(keyword in normalized for keyword in keywords):
                return tag
        return GENERAL

    def rank(
        self,
        windows: Sequence[tuple[str, Archetype]],
        context: str
    ) -> list[str]:
        """Rank app ids by the context's archetype priorities (stable)."""
        table = self.priority_tables.get(context, self.priority_tables[GENERAL])
        # sorted() is stable, so ties keep input order
        ranked = sorted(windows, key=lambda w: table.get(w[1], 0), reverse=True)
        return [app_id for app_id, _ in ranked]

    def resolve(
        self,
        text: str,
        windows: Sequence[tuple[str, Archetype]],
        focus: Optional[str] = None
    ) -> ContextResolution:
        """
        Resolve context and focused app.

        Args:
            text: Free-text user intent (may be empty).
            windows: (app id, archetype) pairs in input order.
            focus: Explicit focus target supplied by the caller.

        Returns:
            ContextResolution.

        Raises:
            InvalidInputError: If there are no windows or the explicit focus
                names an app that is not present.
        """
        if not windows:
            raise InvalidInputError("cannot resolve focus without windows")

        context = self.extract_context(text)

        if focus is not None:
            wanted = focus.strip().lower()
            for app_id, _ in windows:
                if app_id.strip().lower() == wanted:
                    return ContextResolution(context, app_id, "explicit")
            raise InvalidInputError(f"focus target {focus!r} is not among the apps")

        return ContextResolution(context, self.rank(windows, context)[0], "ranked")
