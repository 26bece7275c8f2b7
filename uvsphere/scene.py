"""Scene documents: JSON in, shapes and view settings out.

The document layout (version 1)::

    {
      "version": 1,
      "rotation": {"rotX": 20, "rotY": -35, "rotZ": 0},   # degrees
      "showGuides": true,
      "fadeBackfaces": false,
      "transparentSphere": false,
      "projection": "orthographic",
      "flipU": false,
      "flipV": false,
      "scene": {"shapes": [{"type": "circle", ...}, ...]}
    }

Shape entries use the keys below.  Style keys (``stroke``,
``strokeWidth``, ``fill``) are optional on every shape; unknown keys such
as ``id`` are ignored.

==============  ===========================================================
``line``        ``a``, ``b`` (``{"u": .., "v": ..}``)
``rect``        ``origin``, ``size`` (``{"w": .., "h": ..}``)
``circle``      ``center``, ``radius``
``polygon``     ``center``, ``radius``, ``sides``, ``rotation`` (radians)
``latitude``    ``v``
``longitude``   ``u``
``path``        ``points`` (``[[u, v], ...]``), ``closed``, ``origin``,
                ``scale``, ``rotation``
==============  ===========================================================
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Union

from uvsphere.pipeline import ProjectionConfig
from uvsphere.projection import ProjectionMode
from uvsphere.shapes import (
    Circle,
    ImportedPath,
    LatitudeRing,
    Line,
    LongitudeRing,
    Orientation,
    Rect,
    RegularPolygon,
    Shape,
    Style,
)
from uvsphere.sphere import UV, Rotation

logger = logging.getLogger(__name__)

SCENE_VERSION = 1


class SceneError(ValueError):
    """A scene document is malformed."""


@dataclass
class SceneDocument:
    """A parsed scene with its view settings.

    Attributes:
        shapes: Shapes in drawing order.
        rotation: Sphere rotation (stored in degrees in the file).
        projection: Camera model.
        orientation: UV flips.
        show_guides: Draw the graticule.
        fade_backfaces: Draw back-facing parts faded (split mode).
        transparent_sphere: Show back faces through the sphere.
    """

    shapes: List[Shape] = field(default_factory=list)
    rotation: Rotation = field(default_factory=Rotation)
    projection: ProjectionMode = ProjectionMode.ORTHOGRAPHIC
    orientation: Orientation = field(default_factory=Orientation)
    show_guides: bool = False
    fade_backfaces: bool = False
    transparent_sphere: bool = False

    def to_config(self, density: int = 64) -> ProjectionConfig:
        """Projection settings described by this document."""
        return ProjectionConfig(
            mode=self.projection,
            density=density,
            orientation=self.orientation,
            include_back_faces=self.transparent_sphere,
            split_back_faces=self.fade_backfaces,
        )


# ---------------------------------------------------------------------------
# Field readers
# ---------------------------------------------------------------------------

def _require(data: Dict[str, Any], key: str, where: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise SceneError(f"{where}: missing field '{key}'") from None


def _number(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SceneError(f"{where}: expected a number, got {value!r}")
    return float(value)


def _flag(data: Dict[str, Any], key: str, where: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise SceneError(f"{where}: '{key}' must be true or false, got {value!r}")
    return value


def _uv(value: Any, where: str) -> UV:
    if isinstance(value, dict):
        return (_number(_require(value, "u", where), f"{where}.u"),
                _number(_require(value, "v", where), f"{where}.v"))
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return (_number(value[0], f"{where}[0]"), _number(value[1], f"{where}[1]"))
    raise SceneError(f"{where}: expected {{'u': .., 'v': ..}}, got {value!r}")


def _style(data: Dict[str, Any]) -> Style:
    fill = data.get("fill")
    if fill in ("none", ""):
        fill = None
    return Style(
        stroke=data.get("stroke", "#000000"),
        stroke_width=data.get("strokeWidth", 0.002),
        fill=fill,
    )


# ---------------------------------------------------------------------------
# Shape readers
# ---------------------------------------------------------------------------

def _read_line(d: Dict[str, Any], where: str) -> Line:
    return Line(_uv(_require(d, "a", where), f"{where}.a"),
                _uv(_require(d, "b", where), f"{where}.b"),
                _style(d))


def _read_rect(d: Dict[str, Any], where: str) -> Rect:
    size = _require(d, "size", where)
    if not isinstance(size, dict):
        raise SceneError(f"{where}.size: expected {{'w': .., 'h': ..}}, got {size!r}")
    return Rect(_uv(_require(d, "origin", where), f"{where}.origin"),
                _number(_require(size, "w", f"{where}.size"), f"{where}.size.w"),
                _number(_require(size, "h", f"{where}.size"), f"{where}.size.h"),
                _style(d))


def _read_circle(d: Dict[str, Any], where: str) -> Circle:
    return Circle(_uv(_require(d, "center", where), f"{where}.center"),
                  _number(_require(d, "radius", where), f"{where}.radius"),
                  _style(d))


def _read_polygon(d: Dict[str, Any], where: str) -> RegularPolygon:
    sides = _number(d.get("sides", 5), f"{where}.sides")
    return RegularPolygon(_uv(_require(d, "center", where), f"{where}.center"),
                          _number(_require(d, "radius", where), f"{where}.radius"),
                          max(3, int(round(sides))),
                          _number(d.get("rotation", 0.0), f"{where}.rotation"),
                          _style(d))


def _read_latitude(d: Dict[str, Any], where: str) -> LatitudeRing:
    return LatitudeRing(_number(_require(d, "v", where), f"{where}.v"), _style(d))


def _read_longitude(d: Dict[str, Any], where: str) -> LongitudeRing:
    return LongitudeRing(_number(_require(d, "u", where), f"{where}.u"), _style(d))


def _read_path(d: Dict[str, Any], where: str) -> ImportedPath:
    raw = _require(d, "points", where)
    if not isinstance(raw, list):
        raise SceneError(f"{where}.points: expected a list, got {raw!r}")
    points = tuple(_uv(p, f"{where}.points[{i}]") for i, p in enumerate(raw))
    return ImportedPath(points,
                        _flag(d, "closed", where),
                        _uv(d.get("origin", {"u": 0.5, "v": 0.5}), f"{where}.origin"),
                        _number(d.get("scale", 1.0), f"{where}.scale"),
                        _number(d.get("rotation", 0.0), f"{where}.rotation"),
                        _style(d))


_READERS: Dict[str, Callable[[Dict[str, Any], str], Shape]] = {
    "line": _read_line,
    "rect": _read_rect,
    "circle": _read_circle,
    "polygon": _read_polygon,
    "latitude": _read_latitude,
    "longitude": _read_longitude,
    "path": _read_path,
}


def shape_from_dict(data: Dict[str, Any], where: str = "shape") -> Shape:
    """Build a shape from its document entry.

    Raises:
        SceneError: If the entry is malformed or its ``type`` is unknown.
    """
    if not isinstance(data, dict):
        raise SceneError(f"{where}: expected an object, got {data!r}")
    kind = _require(data, "type", where)
    try:
        reader = _READERS[kind]
    except (KeyError, TypeError):
        available = ", ".join(sorted(_READERS))
        raise SceneError(
            f"{where}: unknown shape type {kind!r}. Known types: {available}"
        ) from None
    try:
        return reader(data, where)
    except SceneError:
        raise
    except (TypeError, ValueError) as exc:
        raise SceneError(f"{where}: {exc}") from exc


# ---------------------------------------------------------------------------
# Shape writers
# ---------------------------------------------------------------------------

def _uv_dict(uv: UV) -> Dict[str, float]:
    return {"u": uv[0], "v": uv[1]}


def shape_to_dict(shape: Shape) -> Dict[str, Any]:
    """Document entry for *shape*.

    Raises:
        TypeError: If *shape* is not a known shape type.
    """
    if isinstance(shape, Line):
        data: Dict[str, Any] = {"type": "line", "a": _uv_dict(shape.a), "b": _uv_dict(shape.b)}
    elif isinstance(shape, Rect):
        data = {"type": "rect", "origin": _uv_dict(shape.origin),
                "size": {"w": shape.width, "h": shape.height}}
    elif isinstance(shape, Circle):
        data = {"type": "circle", "center": _uv_dict(shape.center), "radius": shape.radius}
    elif isinstance(shape, RegularPolygon):
        data = {"type": "polygon", "center": _uv_dict(shape.center), "radius": shape.radius,
                "sides": shape.sides, "rotation": shape.rotation}
    elif isinstance(shape, LatitudeRing):
        data = {"type": "latitude", "v": shape.v}
    elif isinstance(shape, LongitudeRing):
        data = {"type": "longitude", "u": shape.u}
    elif isinstance(shape, ImportedPath):
        data = {"type": "path", "points": [list(p) for p in shape.points],
                "closed": shape.path_closed, "origin": _uv_dict(shape.origin),
                "scale": shape.scale, "rotation": shape.rotation}
    else:
        raise TypeError(f"Unknown shape type '{type(shape).__name__}'")

    data["stroke"] = shape.style.stroke
    data["strokeWidth"] = shape.style.stroke_width
    if shape.style.fill is not None:
        data["fill"] = shape.style.fill
    return data


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

def parse_scene(text: str) -> SceneDocument:
    """Parse a scene document from JSON text.

    Raises:
        SceneError: On invalid JSON, a wrong version, or a malformed field.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SceneError(f"Invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise SceneError("Scene document must be a JSON object")
    if data.get("version") != SCENE_VERSION:
        raise SceneError(f"Unsupported scene version: {data.get('version')!r}")

    scene = data.get("scene")
    if not isinstance(scene, dict) or not isinstance(scene.get("shapes"), list):
        raise SceneError("Invalid scene: expected 'scene.shapes' to be a list")

    rot = data.get("rotation", {})
    if not isinstance(rot, dict):
        raise SceneError(f"rotation: expected an object, got {rot!r}")
    rotation = Rotation.from_degrees(
        _number(rot.get("rotX", 0.0), "rotation.rotX"),
        _number(rot.get("rotY", 0.0), "rotation.rotY"),
        _number(rot.get("rotZ", 0.0), "rotation.rotZ"),
    )

    try:
        projection = ProjectionMode.parse(data.get("projection", "orthographic"))
    except ValueError as exc:
        raise SceneError(str(exc)) from None

    shapes = [
        shape_from_dict(entry, f"scene.shapes[{idx}]")
        for idx, entry in enumerate(scene["shapes"])
    ]
    logger.debug("Parsed scene with %d shape(s)", len(shapes))

    return SceneDocument(
        shapes=shapes,
        rotation=rotation,
        projection=projection,
        orientation=Orientation(_flag(data, "flipU", "document"), _flag(data, "flipV", "document")),
        show_guides=_flag(data, "showGuides", "document"),
        fade_backfaces=_flag(data, "fadeBackfaces", "document"),
        transparent_sphere=_flag(data, "transparentSphere", "document"),
    )


def dump_scene(doc: SceneDocument) -> str:
    """Serialize *doc* to JSON text (two-space indent)."""
    data = {
        "version": SCENE_VERSION,
        "rotation": {
            "rotX": math.degrees(doc.rotation.rx),
            "rotY": math.degrees(doc.rotation.ry),
            "rotZ": math.degrees(doc.rotation.rz),
        },
        "showGuides": doc.show_guides,
        "fadeBackfaces": doc.fade_backfaces,
        "transparentSphere": doc.transparent_sphere,
        "projection": doc.projection.value,
        "flipU": doc.orientation.flip_u,
        "flipV": doc.orientation.flip_v,
        "scene": {"shapes": [shape_to_dict(s) for s in doc.shapes]},
    }
    return json.dumps(data, indent=2)


def load_scene(path: Union[str, Path]) -> SceneDocument:
    """Read and parse the scene document at *path*."""
    return parse_scene(Path(path).read_text(encoding="utf-8"))
