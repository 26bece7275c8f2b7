"""Camera models: rotated sphere point -> view-plane point.

Each projector returns ``None`` for a culled point. The caller drops culled
points; they are never an error.
"""

from __future__ import annotations

import enum
from typing import Optional, Tuple

from uvsphere.sphere import Vec3

XY = Tuple[float, float]

# Distance of the perspective camera from the sphere center, along +z.
DEFAULT_CAMERA_Z = 4.0

# Points this far behind the z = 0 plane still count as front-facing.
HORIZON_EPSILON = 1e-12

# Stereographic projection blows up near the projection pole (0, 0, 1).
STEREOGRAPHIC_EPSILON = 1e-6


class ProjectionMode(enum.Enum):
    """Supported camera models."""

    ORTHOGRAPHIC = "orthographic"
    PERSPECTIVE = "perspective"
    STEREOGRAPHIC = "stereographic"

    @classmethod
    def parse(cls, value: "str | ProjectionMode") -> "ProjectionMode":
        """Convert a mode name to a :class:`ProjectionMode`.

        Raises:
            ValueError: If *value* is not a known mode.  The message lists
                the available modes.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            available = ", ".join(m.value for m in cls)
            raise ValueError(
                f"Unknown projection mode '{value}'. Available modes: {available}"
            ) from None


def project_orthographic(p: Vec3, include_back_faces: bool = False) -> Optional[XY]:
    """Drop z.  Back-facing points (``z < -HORIZON_EPSILON``) are culled
    unless *include_back_faces* is set."""
    if p[2] < -HORIZON_EPSILON and not include_back_faces:
        return None
    return (p[0], p[1])


def project_perspective(p: Vec3, camera_z: float = DEFAULT_CAMERA_Z) -> Optional[XY]:
    """Pinhole camera at ``(0, 0, camera_z)`` looking at the origin.

    Points at or behind the camera plane are culled.
    """
    denom = camera_z - p[2]
    if denom <= 0.0:
        return None
    scale = camera_z / denom
    return (p[0] * scale, p[1] * scale)


def project_stereographic(p: Vec3) -> Optional[XY]:
    """Stereographic projection from the pole ``(0, 0, 1)``.

    Points within :data:`STEREOGRAPHIC_EPSILON` of the pole are culled.
    """
    denom = 1.0 - p[2]
    if denom <= STEREOGRAPHIC_EPSILON:
        return None
    return (p[0] / denom, p[1] / denom)


def project_point(
    p: Vec3,
    mode: ProjectionMode,
    include_back_faces: bool = False,
    camera_z: float = DEFAULT_CAMERA_Z,
) -> Optional[XY]:
    """Project *p* with the camera model selected by *mode*.

    Raises:
        ValueError: If *mode* is not a :class:`ProjectionMode`.
    """
    if mode is ProjectionMode.ORTHOGRAPHIC:
        return project_orthographic(p, include_back_faces)
    if mode is ProjectionMode.PERSPECTIVE:
        return project_perspective(p, camera_z)
    if mode is ProjectionMode.STEREOGRAPHIC:
        return project_stereographic(p)
    raise ValueError(f"Unknown projection mode: {mode!r}")
