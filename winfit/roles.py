"""
Winfit role assigner.
"""

from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from .types import Archetype, LayoutRole

DEFAULT_ROLES: Mapping[Archetype, LayoutRole] = MappingProxyType({
    Archetype.CODE_WORKSPACE: LayoutRole.PRIMARY,
    Archetype.TEXT_STREAM: LayoutRole.SIDE_COLUMN,
    Archetype.CONTENT_CANVAS: LayoutRole.CASCADE_LAYER,
    Archetype.GLANCEABLE_MONITOR: LayoutRole.CORNER,
    Archetype.UNKNOWN: LayoutRole.CASCADE_LAYER,
})


def assign_roles(
    windows: Sequence[tuple[str, Archetype]],
    focused_app: Optional[str] = None
) -> dict[str, LayoutRole]:
    """
    Assign one role per window.

    The focused window is promoted to PRIMARY and any other window whose
    archetype defaults to PRIMARY is demoted to CASCADE_LAYER, so exactly
    one PRIMARY exists whenever there is at least one window.

    Args:
        windows: (app id, archetype) pairs in input order.
        focused_app: App id of the focused window, if any.

    Returns:
        Dictionary mapping app id to role, in input order.
    """
    roles = {app_id: DEFAULT_ROLES[archetype] for app_id, archetype in windows}
    if not roles:
        return roles

    primary = focused_app if focused_app in roles else None
    if primary is None:
        defaults = [a for a, role in roles.items() if role == LayoutRole.PRIMARY]
        primary = defaults[0] if defaults else next(iter(roles))

    for app_id, role in roles.items():
        if app_id == primary:
            roles[app_id] = LayoutRole.PRIMARY
        elif role == LayoutRole.PRIMARY:
            roles[app_id] = LayoutRole.CASCADE_LAYER

    return roles
