"""CLI argument parsing and entry point.

Loads a scene document, applies command line overrides, projects every
shape onto the rotated sphere, and writes the resulting SVG to a file or
to stdout.
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Sequence

from uvsphere import __version__
from uvsphere.logging_config import setup_logging
from uvsphere.projection import ProjectionMode
from uvsphere.scene import SceneDocument, SceneError, load_scene
from uvsphere.shapes import Orientation
from uvsphere.sphere import Rotation
from uvsphere.svg import render_svg

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# CLI configuration dataclass
# ---------------------------------------------------------------------------

VALID_PROJECTIONS = tuple(mode.value for mode in ProjectionMode)

# Sample density used for every shape unless --density says otherwise.
DEFAULT_DENSITY = 120


@dataclass
class CLIConfig:
    """Parsed CLI configuration.

    ``None`` for an override field means "use the value from the scene".
    """

    scene: str = ""
    output: Optional[str] = None
    projection: Optional[str] = None
    density: int = DEFAULT_DENSITY
    rot_x: Optional[float] = None
    rot_y: Optional[float] = None
    rot_z: Optional[float] = None
    guides: bool = False
    split_back_faces: bool = False
    include_back_faces: bool = False
    flip_u: bool = False
    flip_v: bool = False
    verbosity: int = 0
    log_file: Optional[str] = None


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _validate_projection(name: Optional[str]) -> Optional[str]:
    """Validate the projection name.

    Returns the normalized name if valid; otherwise prints the available
    modes and exits with an error.
    """
    if name is None:
        return None
    try:
        return ProjectionMode.parse(name).value
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)


def parse_args(argv: Optional[Sequence[str]] = None) -> CLIConfig:
    """Parse CLI arguments and return a :class:`CLIConfig`.

    Parameters
    ----------
    argv : sequence of str or None
        Command-line arguments to parse.  When ``None``, reads from
        ``sys.argv[1:]`` (the default argparse behavior).

    Returns
    -------
    CLIConfig
        Validated configuration.
    """
    parser = argparse.ArgumentParser(
        prog="uvsphere",
        description="Project a UV scene onto a rotated sphere and write SVG.",
    )

    parser.add_argument("scene", metavar="SCENE", help="Scene document (JSON)")
    parser.add_argument(
        "-o", "--output",
        metavar="FILE",
        default=None,
        help="Write SVG to FILE instead of stdout",
    )
    parser.add_argument(
        "--projection",
        type=str,
        default=None,
        metavar="MODE",
        help=f"Camera model: {', '.join(VALID_PROJECTIONS)} (default: from scene)",
    )
    parser.add_argument(
        "--density",
        type=int,
        default=DEFAULT_DENSITY,
        metavar="N",
        help=f"Tessellation density (default: {DEFAULT_DENSITY})",
    )
    for axis in ("x", "y", "z"):
        parser.add_argument(
            f"--rot-{axis}",
            type=float,
            default=None,
            metavar="DEG",
            help=f"Rotation about {axis.upper()} in degrees (default: from scene)",
        )
    parser.add_argument("--guides", action="store_true", help="Draw the graticule")
    parser.add_argument(
        "--split-back-faces",
        action="store_true",
        help="Draw back-facing parts faded instead of hiding them",
    )
    parser.add_argument(
        "--include-back-faces",
        action="store_true",
        help="Treat the sphere as transparent",
    )
    parser.add_argument("--flip-u", action="store_true", help="Mirror the scene in u")
    parser.add_argument("--flip-v", action="store_true", help="Mirror the scene in v")
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Log progress (-v) or debug details (-vv) to stderr",
    )
    parser.add_argument("--log-file", metavar="FILE", default=None, help="Also log to FILE")
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    args = parser.parse_args(argv)

    if args.density < 1:
        print(f"Error: --density must be at least 1, got {args.density}", file=sys.stderr)
        sys.exit(2)

    return CLIConfig(
        scene=args.scene,
        output=args.output,
        projection=_validate_projection(args.projection),
        density=args.density,
        rot_x=args.rot_x,
        rot_y=args.rot_y,
        rot_z=args.rot_z,
        guides=args.guides,
        split_back_faces=args.split_back_faces,
        include_back_faces=args.include_back_faces,
        flip_u=args.flip_u,
        flip_v=args.flip_v,
        verbosity=args.verbose,
        log_file=args.log_file,
    )


# ---------------------------------------------------------------------------
# Scene overrides
# ---------------------------------------------------------------------------


def apply_overrides(doc: SceneDocument, config: CLIConfig) -> SceneDocument:
    """Return *doc* with the command line overrides from *config* applied.

    Flags only switch options on; they never turn off what the scene
    enables.
    """
    rot = doc.rotation
    rotation = Rotation(
        math.radians(config.rot_x) if config.rot_x is not None else rot.rx,
        math.radians(config.rot_y) if config.rot_y is not None else rot.ry,
        math.radians(config.rot_z) if config.rot_z is not None else rot.rz,
    )
    projection = doc.projection
    if config.projection is not None:
        projection = ProjectionMode.parse(config.projection)

    return replace(
        doc,
        rotation=rotation,
        projection=projection,
        orientation=Orientation(
            doc.orientation.flip_u or config.flip_u,
            doc.orientation.flip_v or config.flip_v,
        ),
        show_guides=doc.show_guides or config.guides,
        fade_backfaces=doc.fade_backfaces or config.split_back_faces,
        transparent_sphere=doc.transparent_sphere or config.include_back_faces,
    )


def _log_level(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point for uvsphere.

    Parses CLI arguments, loads the scene, renders it and writes the SVG.
    Exits with code 1 when the scene file cannot be read and code 2 when
    it is malformed.

    Parameters
    ----------
    argv : sequence of str or None
        Command-line arguments.  When ``None``, reads from ``sys.argv``.
    """
    config = parse_args(argv)
    setup_logging(_log_level(config.verbosity), config.log_file)

    try:
        doc = load_scene(config.scene)
    except OSError as exc:
        print(f"Error: cannot read scene '{config.scene}': {exc}", file=sys.stderr)
        sys.exit(1)
    except SceneError as exc:
        print(f"Error: {config.scene}: {exc}", file=sys.stderr)
        sys.exit(2)

    doc = apply_overrides(doc, config)
    logger.info(
        "Rendering %d shape(s) with %s projection",
        len(doc.shapes),
        doc.projection.value,
    )

    svg = render_svg(
        doc.shapes,
        doc.rotation,
        doc.to_config(config.density),
        show_guides=doc.show_guides,
    )

    if config.output:
        Path(config.output).write_text(svg, encoding="utf-8")
        logger.info("Wrote %s", config.output)
    else:
        sys.stdout.write(svg)
