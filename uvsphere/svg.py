"""SVG markup for the projected sphere view.

The view box spans ``[-1.1, 1.1]`` on both axes around the unit limb.
View-plane y points up, SVG y points down, so y is negated on output.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence
from xml.sax.saxutils import quoteattr

from uvsphere.pipeline import ProjectedShape, ProjectionConfig, graticule, project_scene
from uvsphere.projection import XY
from uvsphere.shapes import Shape
from uvsphere.sphere import IDENTITY, Rotation

VIEW_BOX = "-1.1 -1.1 2.2 2.2"

# Strokes are drawn thicker on the sphere than in UV space.
STROKE_SCALE = 2.0

BACK_FACE_OPACITY = 0.35

SPHERE_FILL = "#fafafa"
SPHERE_STROKE = "#cccccc"
GUIDE_STROKE = "#e0e0e0"

_LINE_ATTRS = 'stroke-linecap="round" stroke-linejoin="round"'


def format_points(points: Sequence[XY]) -> str:
    """SVG ``points`` attribute value, with y flipped."""
    return " ".join(f"{_num(x)},{_num(-y)}" for x, y in points)


def _num(value: float) -> str:
    # Six decimals is far below a pixel at any sane output size; -0 is
    # folded to 0.
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def ensure_closed(points: Sequence[XY]) -> List[XY]:
    """Repeat the first point at the end unless it is already there."""
    pts = list(points)
    if not pts:
        return pts
    (x0, y0), (x1, y1) = pts[0], pts[-1]
    if abs(x0 - x1) < 1e-6 and abs(y0 - y1) < 1e-6:
        return pts
    return pts + [pts[0]]


def shape_markup(projected: ProjectedShape) -> List[str]:
    """SVG elements for one projected shape, back paths first."""
    style = projected.shape.style
    stroke = quoteattr(style.stroke)
    width = _num(style.stroke_width * STROKE_SCALE)
    elements: List[str] = []

    for path in projected.back_paths:
        elements.append(
            f'<polyline points="{format_points(path)}" fill="none" stroke={stroke} '
            f'stroke-width="{width}" {_LINE_ATTRS} opacity="{BACK_FACE_OPACITY}" />'
        )

    for path in projected.paths:
        if projected.is_polygon and len(path) >= 3:
            fill = quoteattr(style.fill or "none")
            elements.append(
                f'<polygon points="{format_points(ensure_closed(path))}" fill={fill} '
                f'stroke={stroke} stroke-width="{width}" {_LINE_ATTRS} />'
            )
        else:
            elements.append(
                f'<polyline points="{format_points(path)}" fill="none" stroke={stroke} '
                f'stroke-width="{width}" {_LINE_ATTRS} />'
            )
    return elements


def render_svg(
    shapes: Iterable[Shape],
    rotation: Rotation = IDENTITY,
    config: Optional[ProjectionConfig] = None,
    show_guides: bool = False,
) -> str:
    """Render *shapes* on the rotated sphere as a standalone SVG document."""
    if config is None:
        config = ProjectionConfig()

    sphere_fill = "none" if config.include_back_faces else SPHERE_FILL
    parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="{VIEW_BOX}">',
        f'  <circle cx="0" cy="0" r="1" fill="{sphere_fill}" '
        f'stroke="{SPHERE_STROKE}" stroke-width="0.01" />',
    ]

    if show_guides:
        parts.append("  <g>")
        for line in graticule(rotation, config):
            parts.append(
                f'    <polyline points="{format_points(line)}" fill="none" '
                f'stroke="{GUIDE_STROKE}" stroke-width="0.004" {_LINE_ATTRS} />'
            )
        parts.append("  </g>")

    parts.append("  <g>")
    for projected in project_scene(shapes, rotation, config):
        parts.extend(f"    {element}" for element in shape_markup(projected))
    parts.append("  </g>")
    parts.append("</svg>")
    return "\n".join(parts) + "\n"
