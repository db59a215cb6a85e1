"""
Winfit - Constraint-directed window layout solver.

Classifies application windows into behavioral archetypes, picks a focus
from the user's context, and computes a normalized arrangement that balances
screen coverage, minimum functional sizes and clickability.

Basic Usage:
    from winfit import LayoutSolver, Screen

    solver = LayoutSolver()
    result = solver.solve(
        ["VS Code", "Safari", "Terminal"],
        screen_width=1440,
        screen_height=900,
        context="debugging the login flow",
    )

    for window in result.windows:
        print(window.app_id, window.role.value, window.to_pixels(Screen(1440, 900)))

With Configuration:
    from winfit import build_solver, load_config

    config = load_config()
    solver = build_solver(config)

Pixel bounds are applied by the caller; WindowPlacement.to_pixels scales a
placement to a concrete screen.
"""

__version__ = "0.1.0"
__author__ = "Winfit Contributors"

# Core types
from .types import (
    Archetype,
    LayoutRole,
    LayoutMode,
    ViolationKind,
    DiagnosticKind,
    Screen,
    AppRequest,
    WindowSpec,
    PlacementRect,
    Arrangement,
    Constraints,
    Violation,
    ValidationResult,
    Diagnostic,
    WindowPlacement,
    SolveResult,
)
from .errors import WinfitError, InvalidInputError

# Core classes
from .classifier import ArchetypeClassifier
from .context import ContextResolver, ContextResolution
from .roles import assign_roles
from .sizing import SizingPolicy
from .positioner import Positioner
from .coverage import CoverageAnalyzer
from .validator import ConstraintValidator
from .strategies import LADDER, Strategy
from .priors import PreferencePrior, StaticPrior
from .solver import LayoutSolver

# Configuration
from .config import (
    WinfitConfig,
    SolverConfig,
    SizingConfig,
    ClassifierConfig,
    load_config,
    save_config,
    get_config_path,
    build_solver,
)

__all__ = [
    # Version
    "__version__",

    # Types
    "Archetype",
    "LayoutRole",
    "LayoutMode",
    "ViolationKind",
    "DiagnosticKind",
    "Screen",
    "AppRequest",
    "WindowSpec",
    "PlacementRect",
    "Arrangement",
    "Constraints",
    "Violation",
    "ValidationResult",
    "Diagnostic",
    "WindowPlacement",
    "SolveResult",

    # Errors
    "WinfitError",
    "InvalidInputError",

    # Core
    "ArchetypeClassifier",
    "ContextResolver",
    "ContextResolution",
    "assign_roles",
    "SizingPolicy",
    "Positioner",
    "CoverageAnalyzer",
    "ConstraintValidator",
    "LADDER",
    "Strategy",
    "PreferencePrior",
    "StaticPrior",
    "LayoutSolver",

    # Configuration
    "WinfitConfig",
    "SolverConfig",
    "SizingConfig",
    "ClassifierConfig",
    "load_config",
    "save_config",
    "get_config_path",
    "build_solver",
]
