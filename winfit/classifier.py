"""
Winfit archetype classifier.

Maps raw application names to behavioral archetypes using a name table,
fuzzy substring matching and ordered keyword rules.
"""

import logging
from types import MappingProxyType
from typing import Mapping, Optional

from .types import Archetype

logger = logging.getLogger(__name__)

_A = Archetype

# Insertion order matters: it breaks ties between equally long fuzzy matches.
APP_TABLE: Mapping[str, Archetype] = MappingProxyType({
    # Text streams
    "terminal": _A.TEXT_STREAM,
    "iterm": _A.TEXT_STREAM,
    "iterm2": _A.TEXT_STREAM,
    "console": _A.TEXT_STREAM,
    "hyper": _A.TEXT_STREAM,
    "warp": _A.TEXT_STREAM,
    "alacritty": _A.TEXT_STREAM,
    "kitty": _A.TEXT_STREAM,
    "wezterm": _A.TEXT_STREAM,
    "slack": _A.TEXT_STREAM,
    "discord": _A.TEXT_STREAM,
    "messages": _A.TEXT_STREAM,
    "telegram": _A.TEXT_STREAM,
    "whatsapp": _A.TEXT_STREAM,
    "signal": _A.TEXT_STREAM,
    "skype": _A.TEXT_STREAM,
    "zoom": _A.TEXT_STREAM,
    "microsoft teams": _A.TEXT_STREAM,
    "log viewer": _A.TEXT_STREAM,

    # Content canvases
    "browser": _A.CONTENT_CANVAS,
    "arc": _A.CONTENT_CANVAS,
    "safari": _A.CONTENT_CANVAS,
    "chrome": _A.CONTENT_CANVAS,
    "google chrome": _A.CONTENT_CANVAS,
    "firefox": _A.CONTENT_CANVAS,
    "edge": _A.CONTENT_CANVAS,
    "brave": _A.CONTENT_CANVAS,
    "opera": _A.CONTENT_CANVAS,
    "preview": _A.CONTENT_CANVAS,
    "pdf viewer": _A.CONTENT_CANVAS,
    "adobe reader": _A.CONTENT_CANVAS,
    "figma": _A.CONTENT_CANVAS,
    "sketch": _A.CONTENT_CANVAS,
    "photoshop": _A.CONTENT_CANVAS,
    "illustrator": _A.CONTENT_CANVAS,
    "canva": _A.CONTENT_CANVAS,
    "notion": _A.CONTENT_CANVAS,
    "obsidian": _A.CONTENT_CANVAS,
    "logseq": _A.CONTENT_CANVAS,
    "bear": _A.CONTENT_CANVAS,
    "notes": _A.CONTENT_CANVAS,
    "pages": _A.CONTENT_CANVAS,
    "word": _A.CONTENT_CANVAS,
    "google docs": _A.CONTENT_CANVAS,
    "keynote": _A.CONTENT_CANVAS,
    "powerpoint": _A.CONTENT_CANVAS,
    "numbers": _A.CONTENT_CANVAS,
    "excel": _A.CONTENT_CANVAS,

    # Code workspaces
    "editor": _A.CODE_WORKSPACE,
    "cursor": _A.CODE_WORKSPACE,
    "xcode": _A.CODE_WORKSPACE,
    "visual studio code": _A.CODE_WORKSPACE,
    "vscode": _A.CODE_WORKSPACE,
    "sublime text": _A.CODE_WORKSPACE,
    "vim": _A.CODE_WORKSPACE,
    "neovim": _A.CODE_WORKSPACE,
    "emacs": _A.CODE_WORKSPACE,
    "intellij": _A.CODE_WORKSPACE,
    "pycharm": _A.CODE_WORKSPACE,
    "webstorm": _A.CODE_WORKSPACE,
    "clion": _A.CODE_WORKSPACE,
    "android studio": _A.CODE_WORKSPACE,
    "zed": _A.CODE_WORKSPACE,
    "sourcetree": _A.CODE_WORKSPACE,
    "github desktop": _A.CODE_WORKSPACE,

    # Glanceable monitors
    "activity monitor": _A.GLANCEABLE_MONITOR,
    "system monitor": _A.GLANCEABLE_MONITOR,
    "htop": _A.GLANCEABLE_MONITOR,
    "btop": _A.GLANCEABLE_MONITOR,
    "spotify": _A.GLANCEABLE_MONITOR,
    "music": _A.GLANCEABLE_MONITOR,
    "apple music": _A.GLANCEABLE_MONITOR,
    "timer": _A.GLANCEABLE_MONITOR,
    "clock": _A.GLANCEABLE_MONITOR,
    "stopwatch": _A.GLANCEABLE_MONITOR,
    "istat menus": _A.GLANCEABLE_MONITOR,
    "finder": _A.GLANCEABLE_MONITOR,
    "file browser": _A.GLANCEABLE_MONITOR,
})

# Ordered keyword rules for names the table does not know.
PATTERN_RULES: tuple[tuple[tuple[str, ...], Archetype], ...] = (
    (("terminal", "console", "shell", "cmd", "bash", "zsh"), _A.TEXT_STREAM),
    (("chat", "message", "messenger", "talk"), _A.TEXT_STREAM),
    (("browser", "web"), _A.CONTENT_CANVAS),
    (("code", "editor", "ide", "dev", "studio"), _A.CODE_WORKSPACE),
    (("design", "photo", "image", "draw"), _A.CONTENT_CANVAS),
    (("music", "audio", "media", "player"), _A.GLANCEABLE_MONITOR),
    (("monitor", "system", "activity", "stats"), _A.GLANCEABLE_MONITOR),
)

DEFAULT_ARCHETYPE = _A.CONTENT_CANVAS


def normalize_name(name: str) -> str:
    """Trim, lowercase and collapse inner whitespace."""
    return " ".join(name.lower().split())


class ArchetypeClassifier:
    """Classifies app names into archetypes."""

    def __init__(
        self,
        extra_apps: Optional[Mapping[str, Archetype | str]] = None,
        rules: Optional[tuple[tuple[tuple[str, ...], Archetype], ...]] = None
    ):
        """
        Initialize classifier.

        Args:
            extra_apps: Additional name -> archetype entries. They take
                precedence over the built-in table.
            rules: Replacement keyword rules.
        """
        table = dict(APP_TABLE)
        for name, archetype in (extra_apps or {}).items():
            if isinstance(archetype, str):
                archetype = Archetype(archetype)
            table[normalize_name(name)] = archetype
        self._table: Mapping[str, Archetype] = MappingProxyType(table)
        self._rules = tuple(rules) if rules is not None else PATTERN_RULES

    @property
    def table(self) -> Mapping[str, Archetype]:
        return self._table

    def _fuzzy_match(self, name: str) -> Optional[Archetype]:
        """Longest table key contained in, or containing, the name."""
        best_key = None
        for key in self._table:
            if key in name or name in key:
                if best_key is None or len(key) > len(best_key):
                    best_key = key
        return self._table[best_key] if best_key is not None else None

    def _pattern_match(self, name: str) -> Optional[Archetype]:
        for keywords, archetype in self._rules:
            if any(keyword in name for keyword in keywords):
                return archetype
        return None

    def classify_detailed(self, name: str) -> tuple[Archetype, str]:
        """
        Classify an app name.

        Returns:
            Tuple of (archetype, match kind) where match kind is one of
            "exact", "fuzzy", "pattern" or "default".
        """
        normalized = normalize_name(name)
        if not normalized:
            return DEFAULT_ARCHETYPE, "default"

        if normalized in self._table:
            return self._table[normalized], "exact"

        archetype = self._fuzzy_match(normalized)
        if archetype is not None:
            return archetype, "fuzzy"

        archetype = self._pattern_match(normalized)
        if archetype is not None:
            return archetype, "pattern"

        logger.debug("No archetype match for %r, defaulting to %s",
                     name, DEFAULT_ARCHETYPE.value)
        return DEFAULT_ARCHETYPE, "default"

    def classify(self, name: str) -> Archetype:
        """Classify an app name into an archetype."""
        return self.classify_detailed(name)[0]
