"""3D sphere math: UV mapping and rotation.

Provides the mapping from the parametric UV square onto the unit sphere
and the Euler rotation applied to sphere points before projection.

Convention:
    x = right, y = up (polar axis), z = toward viewer.
    u sweeps longitude, v sweeps latitude from the south pole (v=0) to
    the north pole (v=1).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

# Type aliases
UV = Tuple[float, float]
Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class Rotation:
    """Euler rotation of the sphere, in radians.

    Applied about X first, then Y, then Z (``R = Rz * Ry * Rx``).
    """

    rx: float = 0.0
    ry: float = 0.0
    rz: float = 0.0

    @classmethod
    def from_degrees(cls, rx: float = 0.0, ry: float = 0.0, rz: float = 0.0) -> "Rotation":
        return cls(math.radians(rx), math.radians(ry), math.radians(rz))


IDENTITY = Rotation()


def uv_to_sphere(u: float, v: float) -> Vec3:
    """Map a UV point onto the unit sphere.

    Longitude ``theta = 2*pi*u - pi`` and latitude ``phi = pi*v - pi/2``.

    Args:
        u: Horizontal parameter (any real; 0..1 covers one full turn).
        v: Vertical parameter (any real; 0..1 runs pole to pole).

    Returns:
        (x, y, z) on the unit sphere.
    """
    theta = 2.0 * math.pi * u - math.pi
    phi = math.pi * v - math.pi / 2.0
    cos_phi = math.cos(phi)
    return (cos_phi * math.cos(theta), math.sin(phi), cos_phi * math.sin(theta))


def rotate_x(x: float, y: float, z: float, angle: float) -> Vec3:
    """Rotate a 3D point around the X axis by *angle* radians."""
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return (x, y * cos_a - z * sin_a, y * sin_a + z * cos_a)


def rotate_y(x: float, y: float, z: float, angle: float) -> Vec3:
    """Rotate a 3D point around the Y axis by *angle* radians."""
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return (x * cos_a + z * sin_a, y, -x * sin_a + z * cos_a)


def rotate_z(x: float, y: float, z: float, angle: float) -> Vec3:
    """Rotate a 3D point around the Z axis by *angle* radians."""
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return (x * cos_a - y * sin_a, x * sin_a + y * cos_a, z)


def apply_rotation(p: Vec3, rot: Rotation) -> Vec3:
    """Apply ``Rz(rz) * Ry(ry) * Rx(rx)`` to *p*.

    The order matters: X first, then Y, then Z.

    Args:
        p: Point to rotate.
        rot: Euler angles in radians.

    Returns:
        Rotated (x, y, z).
    """
    x, y, z = rotate_x(p[0], p[1], p[2], rot.rx)
    x, y, z = rotate_y(x, y, z, rot.ry)
    return rotate_z(x, y, z, rot.rz)
