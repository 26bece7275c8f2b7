"""Shape -> projected, clipped view-plane paths.

:func:`project_shape` runs the full chain for one shape::

    tessellate -> orientation flips -> UV to sphere -> rotate -> branch

and the branch is one of:

* split mode: partition by hemisphere visibility and project the front and
  back runs separately, both with back faces on; no clipping;
* see-through mode (``include_back_faces``): project everything, no
  clipping;
* normal mode: clip at the visible hemisphere in 3D and project; for
  orthographic closed polygons the horizon cuts are closed along the limb
  and the result is clipped against it.

Every call is independent and side-effect free.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from uvsphere.hemisphere import clip_cap, clip_open_curve, is_visible
from uvsphere.projection import DEFAULT_CAMERA_Z, XY, ProjectionMode, project_point
from uvsphere.shapes import Orientation, Shape
from uvsphere.silhouette import clip_to_limb, close_cap_on_limb
from uvsphere.sphere import IDENTITY, UV, Rotation, Vec3, apply_rotation, uv_to_sphere
from uvsphere.tessellate import tessellate

logger = logging.getLogger(__name__)

# Graticule defaults: lines at every 1/8 of u and v, 64 samples per line.
GUIDE_DIVISIONS = 8
GUIDE_STEPS = 64


@dataclass(frozen=True)
class ProjectionConfig:
    """Settings shared by every shape of one projection pass.

    Attributes:
        mode: Camera model.  Strings are accepted and converted.
        density: Tessellation density handed to
            :func:`uvsphere.tessellate.tessellate`.
        orientation: UV flips applied before mapping.
        include_back_faces: Show the far side of the sphere as if it were
            transparent.  Disables hemisphere and limb clipping.
        split_back_faces: Return front and back parts separately so the
            caller can style them differently.
        camera_z: Camera distance for perspective projection.
    """

    mode: ProjectionMode = ProjectionMode.ORTHOGRAPHIC
    density: int = 64
    orientation: Orientation = field(default_factory=Orientation)
    include_back_faces: bool = False
    split_back_faces: bool = False
    camera_z: float = DEFAULT_CAMERA_Z

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", ProjectionMode.parse(self.mode))
        if isinstance(self.density, bool) or not isinstance(self.density, int):
            raise TypeError(f"density expects int, got {type(self.density).__name__}")
        if self.density < 1:
            raise ValueError(f"density must be >= 1, got {self.density}")
        if self.camera_z <= 1.0:
            raise ValueError(
                f"camera_z must be outside the unit sphere (> 1), got {self.camera_z}"
            )


@dataclass(frozen=True)
class ProjectedShape:
    """Render-ready output for one shape.

    Attributes:
        shape: The source shape.
        paths: Visible paths.  A closed polygon yields at most one path;
            open curves and rings may yield several fragments.
        closed: The shape's closed classification.
        back_paths: Back-facing paths (split mode only).
    """

    shape: Shape
    paths: List[List[XY]]
    closed: bool
    back_paths: List[List[XY]] = field(default_factory=list)

    @property
    def points(self) -> List[XY]:
        """The first visible path, or an empty list."""
        return self.paths[0] if self.paths else []

    @property
    def is_polygon(self) -> bool:
        """Whether the paths should be drawn as filled polygons."""
        return self.closed and not self.shape.ring

    @property
    def visible(self) -> bool:
        return bool(self.paths or self.back_paths)


def _to_sphere(uv: UV, rotation: Rotation, orientation: Orientation) -> Vec3:
    return apply_rotation(uv_to_sphere(*orientation.apply(uv)), rotation)


def sphere_points(
    shape: Shape, rotation: Rotation, config: ProjectionConfig
) -> Tuple[List[Vec3], bool]:
    """Tessellate *shape* and carry its samples onto the rotated sphere.

    Returns:
        ``(points, closed)``.
    """
    tess = tessellate(shape, config.density)
    orient = config.orientation
    points = [_to_sphere(uv, rotation, orient) for uv in tess.points]
    return points, tess.closed


def _project_path(
    points: Iterable[Vec3], config: ProjectionConfig, include_back_faces: bool
) -> List[XY]:
    """Project *points*, dropping culled ones."""
    out: List[XY] = []
    for p in points:
        xy = project_point(p, config.mode, include_back_faces, config.camera_z)
        if xy is not None:
            out.append(xy)
    return out


def split_by_facing(
    points: Sequence[Vec3], wrap: bool = False
) -> Tuple[List[List[Vec3]], List[List[Vec3]]]:
    """Partition *points* into consecutive front-facing and back-facing runs.

    Front-facing means visible by :func:`uvsphere.hemisphere.is_visible`.

    With *wrap*, a run that reaches the end joins the run at the start
    when both face the same way.

    Returns:
        ``(front_runs, back_runs)``.
    """
    runs: List[Tuple[bool, List[Vec3]]] = []
    for p in points:
        front = is_visible(p)
        if runs and runs[-1][0] == front:
            runs[-1][1].append(p)
        else:
            runs.append((front, [p]))

    if wrap and len(runs) > 1 and runs[0][0] == runs[-1][0]:
        facing, tail = runs.pop()
        runs[0] = (facing, tail + runs[0][1])

    front_runs = [run for facing, run in runs if facing]
    back_runs = [run for facing, run in runs if not facing]
    return front_runs, back_runs


def _drawable(paths: Iterable[List[XY]]) -> List[List[XY]]:
    return [p for p in paths if len(p) >= 2]


def _project_cap(points: Sequence[Vec3], config: ProjectionConfig) -> List[XY]:
    """Clip a closed outline to the visible hemisphere and project it.

    In orthographic mode the chords cut across the hidden part are
    replaced by limb arcs, and the result goes through the limb clip.
    """
    cap = clip_cap(points)
    if config.mode is not ProjectionMode.ORTHOGRAPHIC:
        return _project_path((p for p, _ in cap), config, False)

    # Every cap vertex is visible, so nothing is culled and the roles
    # stay aligned with the projected points.
    path = _project_path((p for p, _ in cap), config, True)
    path = close_cap_on_limb(path, [role for _, role in cap])
    if len(path) >= 3:
        path = clip_to_limb(path)
    return path


def project_shape(
    shape: Shape,
    rotation: Rotation = IDENTITY,
    config: Optional[ProjectionConfig] = None,
) -> ProjectedShape:
    """Project one shape onto the view plane.

    Args:
        shape: Shape to project.
        rotation: Sphere rotation.
        config: Projection settings; defaults to orthographic.

    Returns:
        The :class:`ProjectedShape`.  A shape with nothing visible has no
        paths; that is not an error.

    Raises:
        TypeError: If *shape* is not a known shape type.
    """
    if config is None:
        config = ProjectionConfig()

    points, closed = sphere_points(shape, rotation, config)
    ring = shape.ring

    if config.split_back_faces:
        front_runs, back_runs = split_by_facing(points, wrap=closed)
        return ProjectedShape(
            shape=shape,
            paths=_drawable(_project_path(run, config, True) for run in front_runs),
            closed=closed,
            back_paths=_drawable(_project_path(run, config, True) for run in back_runs),
        )

    if config.include_back_faces:
        if ring:
            points = points + points[:1]
        paths = _drawable([_project_path(points, config, True)])
        return ProjectedShape(shape=shape, paths=paths, closed=closed)

    if closed and not ring:
        paths = _drawable([_project_cap(points, config)])
    else:
        fragments = clip_open_curve(points, wrap=ring)
        paths = _drawable(_project_path(f, config, False) for f in fragments)

    if not paths:
        logger.debug("%s is not visible from this rotation", shape.kind)
    return ProjectedShape(shape=shape, paths=paths, closed=closed)


def project_scene(
    shapes: Iterable[Shape],
    rotation: Rotation = IDENTITY,
    config: Optional[ProjectionConfig] = None,
) -> List[ProjectedShape]:
    """Project every shape in *shapes*, preserving order."""
    if config is None:
        config = ProjectionConfig()
    return [project_shape(shape, rotation, config) for shape in shapes]


def graticule(
    rotation: Rotation = IDENTITY,
    config: Optional[ProjectionConfig] = None,
    divisions: int = GUIDE_DIVISIONS,
    steps: int = GUIDE_STEPS,
) -> List[List[XY]]:
    """Meridian and parallel guide lines at every ``1/divisions`` of u and v.

    Lines are cut at the visible hemisphere unless back faces are shown.
    """
    if config is None:
        config = ProjectionConfig()
    orient = config.orientation
    see_through = config.include_back_faces or config.split_back_faces

    lines: List[List[XY]] = []
    for i in range(1, divisions):
        k = i / divisions
        meridian = [(k, j / steps) for j in range(steps + 1)]
        parallel = [(j / steps, k) for j in range(steps + 1)]
        for uv_line in (meridian, parallel):
            pts = [_to_sphere(uv, rotation, orient) for uv in uv_line]
            if see_through:
                lines.append(_project_path(pts, config, True))
            else:
                lines.extend(_project_path(f, config, False) for f in clip_open_curve(pts))
    return _drawable(lines)
