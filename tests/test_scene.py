"""Tests for uvsphere.scene - reading and writing scene documents."""

from __future__ import annotations

import json
import math

import pytest

from uvsphere.projection import ProjectionMode
from uvsphere.scene import (
    SceneDocument,
    SceneError,
    dump_scene,
    load_scene,
    parse_scene,
    shape_from_dict,
    shape_to_dict,
)
from uvsphere.shapes import (
    Circle,
    ImportedPath,
    LatitudeRing,
    Line,
    LongitudeRing,
    Orientation,
    Rect,
    RegularPolygon,
    Style,
)
from uvsphere.sphere import Rotation


def _document(shapes, **extra) -> str:
    data = {"version": 1, "scene": {"shapes": shapes}}
    data.update(extra)
    return json.dumps(data)


SAMPLE_SHAPES = [
    Line((0.1, 0.2), (0.3, 0.4)),
    Rect((0.4, 0.4), 0.2, 0.1, Style(fill="#00ff00")),
    Circle((0.75, 0.5), 0.1, Style(stroke="#ff0000", stroke_width=0.004)),
    RegularPolygon((0.7, 0.6), 0.05, 6, 0.25),
    LatitudeRing(0.5),
    LongitudeRing(0.25),
    ImportedPath(((0.0, 0.0), (0.1, 0.0), (0.1, 0.1)), True, (0.6, 0.4), 0.5, 0.3),
]


class TestShapeFromDict:
    def test_circle(self):
        shape = shape_from_dict(
            {"type": "circle", "center": {"u": 0.5, "v": 0.4}, "radius": 0.1, "id": "c1"}
        )
        assert shape == Circle((0.5, 0.4), 0.1)

    def test_rect_size(self):
        shape = shape_from_dict(
            {"type": "rect", "origin": {"u": 0.1, "v": 0.2}, "size": {"w": 0.3, "h": 0.4}}
        )
        assert shape == Rect((0.1, 0.2), 0.3, 0.4)

    def test_style_keys(self):
        shape = shape_from_dict(
            {"type": "latitude", "v": 0.3, "stroke": "#123456", "strokeWidth": 0.01,
             "fill": "none"}
        )
        assert shape.style == Style("#123456", 0.01, None)

    def test_polygon_sides_rounded_and_clamped(self):
        shape = shape_from_dict(
            {"type": "polygon", "center": {"u": 0.5, "v": 0.5}, "radius": 0.1, "sides": 2}
        )
        assert shape.sides == 3
        shape = shape_from_dict(
            {"type": "polygon", "center": {"u": 0.5, "v": 0.5}, "radius": 0.1, "sides": 5.6}
        )
        assert shape.sides == 6

    def test_path_points_as_pairs(self):
        shape = shape_from_dict({"type": "path", "points": [[0, 0], [1, 1]]})
        assert shape.points == ((0.0, 0.0), (1.0, 1.0))
        assert shape.origin == (0.5, 0.5)
        assert shape.closed is False

    def test_unknown_type(self):
        with pytest.raises(SceneError, match="Known types: circle"):
            shape_from_dict({"type": "star"})

    def test_missing_field_named(self):
        with pytest.raises(SceneError, match="missing field 'radius'"):
            shape_from_dict({"type": "circle", "center": {"u": 0.5, "v": 0.5}})

    def test_invalid_value_wrapped(self):
        with pytest.raises(SceneError, match="radius"):
            shape_from_dict({"type": "circle", "center": {"u": 0.5, "v": 0.5}, "radius": -1})

    def test_non_number_rejected(self):
        with pytest.raises(SceneError, match="expected a number"):
            shape_from_dict({"type": "latitude", "v": "half"})

    def test_bad_style_wrapped(self):
        with pytest.raises(SceneError, match="stroke_width"):
            shape_from_dict({"type": "latitude", "v": 0.5, "strokeWidth": "thick"})

    def test_entry_must_be_object(self):
        with pytest.raises(SceneError, match="expected an object"):
            shape_from_dict(["circle"])  # type: ignore[arg-type]


class TestShapeToDict:
    def test_every_shape_round_trips(self):
        for shape in SAMPLE_SHAPES:
            assert shape_from_dict(shape_to_dict(shape)) == shape

    def test_fill_omitted_when_none(self):
        assert "fill" not in shape_to_dict(LatitudeRing(0.5))

    def test_unknown_shape(self):
        with pytest.raises(TypeError, match="Unknown shape type"):
            shape_to_dict(object())  # type: ignore[arg-type]


class TestParseScene:
    def test_defaults(self):
        doc = parse_scene(_document([]))
        assert doc.shapes == []
        assert doc.rotation == Rotation()
        assert doc.projection is ProjectionMode.ORTHOGRAPHIC
        assert doc.orientation == Orientation()
        assert not doc.show_guides

    def test_view_settings(self):
        doc = parse_scene(_document(
            [{"type": "longitude", "u": 0.1}],
            rotation={"rotX": 90, "rotY": -45, "rotZ": 0},
            projection="Stereographic",
            showGuides=True,
            fadeBackfaces=True,
            transparentSphere=True,
            flipU=True,
        ))
        assert doc.shapes == [LongitudeRing(0.1)]
        assert doc.rotation.rx == pytest.approx(math.pi / 2)
        assert doc.rotation.ry == pytest.approx(-math.pi / 4)
        assert doc.projection is ProjectionMode.STEREOGRAPHIC
        assert doc.orientation == Orientation(flip_u=True)
        assert doc.show_guides and doc.fade_backfaces and doc.transparent_sphere

    def test_invalid_json(self):
        with pytest.raises(SceneError, match="Invalid JSON"):
            parse_scene("{not json")

    def test_wrong_version(self):
        with pytest.raises(SceneError, match="Unsupported scene version: 2"):
            parse_scene(json.dumps({"version": 2, "scene": {"shapes": []}}))

    def test_missing_shapes(self):
        with pytest.raises(SceneError, match="scene.shapes"):
            parse_scene(json.dumps({"version": 1, "scene": {}}))

    def test_unknown_projection(self):
        with pytest.raises(SceneError, match="Available modes"):
            parse_scene(_document([], projection="fisheye"))

    def test_flag_must_be_bool(self):
        with pytest.raises(SceneError, match="showGuides"):
            parse_scene(_document([], showGuides="yes"))

    def test_error_names_shape_index(self):
        with pytest.raises(SceneError, match=r"scene.shapes\[1\]"):
            parse_scene(_document([{"type": "latitude", "v": 0.5}, {"type": "blob"}]))


class TestDumpScene:
    def test_round_trip(self):
        doc = SceneDocument(
            shapes=list(SAMPLE_SHAPES),
            rotation=Rotation.from_degrees(20, -35, 10),
            projection=ProjectionMode.PERSPECTIVE,
            orientation=Orientation(flip_v=True),
            show_guides=True,
        )
        again = parse_scene(dump_scene(doc))
        assert again.shapes == doc.shapes
        assert again.projection is ProjectionMode.PERSPECTIVE
        assert again.orientation == doc.orientation
        assert again.show_guides is True
        assert again.rotation.rx == pytest.approx(doc.rotation.rx)
        assert again.rotation.ry == pytest.approx(doc.rotation.ry)
        assert again.rotation.rz == pytest.approx(doc.rotation.rz)

    def test_rotation_written_in_degrees(self):
        data = json.loads(dump_scene(SceneDocument(rotation=Rotation.from_degrees(90, 0, 0))))
        assert data["rotation"]["rotX"] == pytest.approx(90.0)
        assert data["version"] == 1


class TestLoadScene:
    def test_reads_file(self, tmp_path):
        path = tmp_path / "scene.json"
        path.write_text(_document([{"type": "latitude", "v": 0.5}]), encoding="utf-8")
        assert load_scene(path).shapes == [LatitudeRing(0.5)]
        assert load_scene(str(path)).shapes == [LatitudeRing(0.5)]

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_scene(tmp_path / "nope.json")


class TestToConfig:
    def test_maps_view_settings(self):
        doc = SceneDocument(
            projection=ProjectionMode.PERSPECTIVE,
            orientation=Orientation(flip_u=True),
            fade_backfaces=True,
            transparent_sphere=True,
        )
        config = doc.to_config(density=90)
        assert config.mode is ProjectionMode.PERSPECTIVE
        assert config.density == 90
        assert config.orientation == Orientation(flip_u=True)
        assert config.split_back_faces is True
        assert config.include_back_faces is True
