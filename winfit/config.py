"""
Winfit configuration management.

Configuration priority (highest to lowest):
1. CLI arguments (--mode, --visibility, etc.)
2. Config file (~/.config/winfit/config.json or platform-specific)
3. Environment variables (WINFIT_*)
4. Default values (zero-config)

Handles loading, saving, and defaults, and builds a solver from settings.
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional

import platformdirs

from .classifier import ArchetypeClassifier
from .coverage import CoverageAnalyzer
from .positioner import Positioner
from .sizing import DEFAULT_MIN_PIXELS, SizingPolicy
from .solver import LayoutSolver
from .types import Archetype, Constraints

logger = logging.getLogger(__name__)


def _default_min_pixels() -> dict:
    return {archetype.value: list(size) for archetype, size in DEFAULT_MIN_PIXELS.items()}


@dataclass
class SolverConfig:
    """Solver settings."""

    mode: str = "auto"  # auto, tile, cascade
    grid_cell_size: float = 0.01
    visibility_threshold: float = 0.15
    tile_coverage: float = 0.95
    cascade_coverage: float = 0.85


@dataclass
class SizingConfig:
    """Sizing and placement settings."""

    focus_share: float = SizingPolicy.FOCUS_SHARE
    prior_weight: float = SizingPolicy.PRIOR_WEIGHT
    cascade_origin: list = field(default_factory=lambda: list(Positioner.CASCADE_ORIGIN))
    cascade_step: float = Positioner.CASCADE_STEP
    min_pixels: dict = field(default_factory=_default_min_pixels)  # archetype -> [w, h]


@dataclass
class ClassifierConfig:
    """Classifier settings."""

    extra_apps: dict = field(default_factory=dict)  # app name -> archetype value


@dataclass
class WinfitConfig:
    """Main configuration container."""

    solver: SolverConfig = field(default_factory=SolverConfig)
    sizing: SizingConfig = field(default_factory=SizingConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "solver": asdict(self.solver),
            "sizing": asdict(self.sizing),
            "classifier": asdict(self.classifier),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WinfitConfig":
        """Create from dictionary."""
        return cls(
            solver=SolverConfig(**data.get("solver", {})),
            sizing=SizingConfig(**data.get("sizing", {})),
            classifier=ClassifierConfig(**data.get("classifier", {})),
        )

    def apply_env_overrides(self) -> "WinfitConfig":
        """
        Apply environment variable overrides.

        Environment variables:
            WINFIT_MODE - auto/tile/cascade
            WINFIT_GRID_CELL - sampling cell size, e.g. 0.02
            WINFIT_VISIBILITY - minimum visible fraction, e.g. 0.2
        """
        if os.environ.get("WINFIT_MODE"):
            self.solver.mode = os.environ["WINFIT_MODE"].lower()

        for name, attr in (("WINFIT_GRID_CELL", "grid_cell_size"),
                           ("WINFIT_VISIBILITY", "visibility_threshold")):
            raw = os.environ.get(name)
            if not raw:
                continue
            try:
                setattr(self.solver, attr, float(raw))
            except ValueError:
                logger.warning("Ignoring %s=%r: not a number", name, raw)

        return self

    def constraints(self) -> Constraints:
        """Default constraints for solves built from this config."""
        return Constraints(
            min_visible_fraction=self.solver.visibility_threshold,
            tile_coverage=self.solver.tile_coverage,
            cascade_coverage=self.solver.cascade_coverage,
        )


def get_config_dir() -> Path:
    """
    Get platform-specific user config directory.

    Returns:
        - Linux: ~/.config/winfit (or $XDG_CONFIG_HOME/winfit)
        - macOS: ~/Library/Application Support/winfit
        - Windows: C:\\Users\\<user>\\AppData\\Roaming\\winfit
    """
    return Path(platformdirs.user_config_dir("winfit", appauthor=False))


def get_config_path() -> Path:
    """Get configuration file path."""
    return get_config_dir() / "config.json"


def load_config(path: Optional[Path] = None, apply_env: bool = True) -> WinfitConfig:
    """
    Load configuration from file.

    Args:
        path: Config file path. Uses default if None.
        apply_env: Apply environment variable overrides.

    Returns:
        WinfitConfig with loaded or default values.
    """
    config_path = path or get_config_path()
    config = WinfitConfig()

    if config_path.exists():
        try:
            with open(config_path) as f:
                data = json.load(f)
            config = WinfitConfig.from_dict(data)
        except (json.JSONDecodeError, TypeError, KeyError, AttributeError) as e:
            logger.warning("Ignoring unreadable config %s: %s", config_path, e)

    if apply_env:
        config.apply_env_overrides()

    return config


def save_config(config: WinfitConfig, path: Optional[Path] = None) -> bool:
    """
    Save configuration to file.

    Args:
        config: Configuration to save.
        path: Config file path. Uses default if None.

    Returns:
        True if successful.
    """
    config_path = path or get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            json.dump(config.to_dict(), f, indent=2)
        return True
    except OSError as e:
        logger.warning("Could not write config %s: %s", config_path, e)
        return False


def init_config(path: Optional[Path] = None) -> Path:
    """
    Initialize configuration file with defaults.

    Args:
        path: Config file path. Uses default if None.

    Returns:
        Path to created config file.
    """
    config_path = path or get_config_path()
    save_config(WinfitConfig(), config_path)
    return config_path


def build_solver(config: Optional[WinfitConfig] = None) -> LayoutSolver:
    """
    Create a LayoutSolver from configuration.

    Raises:
        ValueError: If a configured archetype name or cell size is invalid.
    """
    config = config or WinfitConfig()
    sizing = config.sizing

    min_pixels = {
        Archetype(name): (float(size[0]), float(size[1]))
        for name, size in sizing.min_pixels.items()
    }
    origin = tuple(float(v) for v in sizing.cascade_origin)

    return LayoutSolver(
        classifier=ArchetypeClassifier(extra_apps=config.classifier.extra_apps),
        policy=SizingPolicy(
            min_pixels=min_pixels,
            focus_share=sizing.focus_share,
            prior_weight=sizing.prior_weight,
        ),
        positioner=Positioner(cascade_origin=origin, cascade_step=sizing.cascade_step),
        analyzer=CoverageAnalyzer(config.solver.grid_cell_size),
        constraints=config.constraints(),
    )
