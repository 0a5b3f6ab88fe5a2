"""Tests for scene description parsing."""

import json
from pathlib import Path

import pytest
import yaml

from facetlight.vec3 import Vec3, Color
from facetlight.materials import Matte, Light
from facetlight.scene import Scene
from facetlight.environment import Sun
from facetlight.renderer import RenderSettings
from facetlight.scene_parser import SceneParser, SceneParseError, load_scene, parse_scene


SCENES_DIR = Path(__file__).resolve().parent.parent / "scenes"


def basic_scene() -> dict:
    return {
        'materials': {
            'grey': {'type': 'matte', 'color': [0.5, 0.5, 0.5]},
            'lamp': {'type': 'light', 'color': [2, 2, 2]},
        },
        'objects': [
            {'type': 'triangle', 'vertices': [[0, 0, -5], [1, 0, -5], [0, 1, -5]], 'material': 'grey'},
            {'type': 'parallelogram', 'corner': [0, 3, 0], 'side_b': [1, 0, 0],
             'side_c': [0, 0, -1], 'material': 'lamp'},
        ],
    }


class TestParseDict:
    """Test parsing from dictionaries."""

    def test_objects(self):
        scene, cameras, settings, environment = parse_scene(basic_scene())

        assert isinstance(scene, Scene)
        assert len(scene) == 3
        assert isinstance(scene.triangles[0].surface, Matte)
        assert isinstance(scene.triangles[1].surface, Light)

    def test_materials_are_shared(self):
        scene, _, _, _ = parse_scene(basic_scene())
        assert scene.triangles[1].surface is scene.triangles[2].surface

    def test_defaults(self):
        _, cameras, settings, environment = parse_scene(basic_scene())

        assert list(cameras) == ['front']
        assert cameras['front'].origin == Vec3(0, 0, 10)
        assert settings == RenderSettings()
        assert environment is None

    def test_render_settings(self):
        data = basic_scene()
        data['render'] = {'width': 32, 'height': 24, 'rays': 3, 'max_depth': 1, 'threads': 2, 'gamma': 1.0}
        _, _, settings, _ = parse_scene(data)

        assert settings.width == 32
        assert settings.height == 24
        assert settings.rays == 3
        assert settings.max_depth == 1
        assert settings.num_threads == 2
        assert settings.gamma == 1.0

    def test_sun(self):
        data = basic_scene()
        data['sun'] = {'direction': [0, 2, 0], 'color': [3, 3, 3], 'half_angle': 10}
        _, _, _, environment = parse_scene(data)

        assert isinstance(environment, Sun)
        assert environment.direction == Vec3(0, 1, 0)
        assert environment.color == Color(3, 3, 3)
        assert environment.half_angle == 10
        assert environment.background.is_black()

    def test_cameras(self):
        data = basic_scene()
        data['cameras'] = {
            'left': {'origin': [-20, 0, -10], 'direction': [1, 0, 0], 'aperture': 45},
            'top': {'origin': [0, 20, 0], 'direction': [0, -1, 0], 'up': [0, 0, -1]},
        }
        _, cameras, _, _ = parse_scene(data)

        assert list(cameras) == ['left', 'top']
        assert cameras['left'].aperture == 45
        assert cameras['top'].up == Vec3(0, 0, -1)

    def test_inline_material(self):
        data = {
            'objects': [
                {'type': 'triangle', 'vertices': [[0, 0, 0], [1, 0, 0], [0, 1, 0]],
                 'material': {'type': 'light', 'color': [1, 0, 0]}},
            ]
        }
        scene, _, _, _ = parse_scene(data)
        assert scene.triangles[0].surface.emitted() == Color(1, 0, 0)

    def test_inline_material_keeps_named_materials(self):
        data = {
            'materials': {'_inline': {'type': 'light', 'color': [0, 0, 1]}},
            'objects': [
                {'vertices': [[0, 0, 0], [1, 0, 0], [0, 1, 0]],
                 'material': {'type': 'matte', 'color': [1, 0, 0]}},
                {'vertices': [[0, 0, -1], [1, 0, -1], [0, 1, -1]], 'material': '_inline'},
            ]
        }
        scene, _, _, _ = parse_scene(data)

        assert isinstance(scene.triangles[0].surface, Matte)
        assert isinstance(scene.triangles[1].surface, Light)
        assert scene.triangles[1].surface.emitted() == Color(0, 0, 1)

    def test_color_formats(self):
        parser = SceneParser()
        assert parser._parse_color('#ff0000') == Color(1, 0, 0)
        assert parser._parse_color({'r': 0.5}) == Color(0.5, 0, 0)
        assert parser._parse_color([0.1, 0.2, 0.3]) == Color(0.1, 0.2, 0.3)

    def test_vec3_formats(self):
        parser = SceneParser()
        assert parser._parse_vec3({'x': 1, 'z': 2}) == Vec3(1, 0, 2)
        assert parser._parse_vec3((1, 2, 3)) == Vec3(1, 2, 3)


class TestParseErrors:
    """Test error reporting."""

    def test_unknown_material_type(self):
        data = basic_scene()
        data['materials']['grey']['type'] = 'glass'
        with pytest.raises(SceneParseError):
            parse_scene(data)

    def test_unknown_material_name(self):
        data = basic_scene()
        data['objects'][0]['material'] = 'missing'
        with pytest.raises(SceneParseError):
            parse_scene(data)

    def test_missing_material(self):
        data = basic_scene()
        del data['objects'][0]['material']
        with pytest.raises(SceneParseError):
            parse_scene(data)

    def test_unknown_object_type(self):
        data = basic_scene()
        data['objects'][0]['type'] = 'sphere'
        with pytest.raises(SceneParseError):
            parse_scene(data)

    def test_wrong_vertex_count(self):
        data = basic_scene()
        data['objects'][0]['vertices'] = [[0, 0, 0], [1, 0, 0]]
        with pytest.raises(SceneParseError):
            parse_scene(data)

    def test_missing_field(self):
        data = basic_scene()
        del data['objects'][1]['side_c']
        with pytest.raises(SceneParseError):
            parse_scene(data)

    def test_degenerate_triangle(self):
        data = basic_scene()
        data['objects'][0]['vertices'] = [[0, 0, 0], [1, 1, 1], [2, 2, 2]]
        with pytest.raises(SceneParseError, match="degenerate"):
            parse_scene(data)

    def test_bad_vector(self):
        data = basic_scene()
        data['objects'][0]['vertices'] = [[0, 0], [1, 0, 0], [0, 1, 0]]
        with pytest.raises(SceneParseError):
            parse_scene(data)

    def test_bad_color_string(self):
        with pytest.raises(SceneParseError):
            SceneParser()._parse_color('red')

    def test_empty_cameras(self):
        data = basic_scene()
        data['cameras'] = {}
        with pytest.raises(SceneParseError):
            parse_scene(data)

    @pytest.mark.parametrize("section, value", [
        ('materials', None),
        ('materials', {'m': 3}),
        ('materials', {'m': {'type': 7}}),
        ('materials', {'m': {'color': ['x', 0, 0]}}),
        ('materials', {'m': {'color': '#gg0000'}}),
        ('objects', None),
        ('objects', ['oops']),
        ('objects', [{'vertices': [['a', 0, 0], [1, 0, 0], [0, 1, 0]],
                      'material': {'type': 'matte'}}]),
        ('objects', [{'type': 'parallelogram', 'corner': {'x': 'left'}, 'side_b': [1, 0, 0],
                      'side_c': [0, 1, 0], 'material': {'type': 'matte'}}]),
        ('sun', 'bright'),
        ('sun', {'half_angle': 'wide'}),
        ('cameras', ['front']),
        ('cameras', {'front': 'here'}),
        ('cameras', {'front': {'aperture': None}}),
        ('cameras', {'top': {'direction': [0, -1, 0], 'up': [0, 1, 0]}}),
        ('render', 'fast'),
        ('render', {'rays': 'six'}),
        ('render', {'gamma': [2.2]}),
    ])
    def test_malformed_section(self, section, value):
        data = basic_scene()
        data[section] = value
        with pytest.raises(SceneParseError):
            parse_scene(data)

    def test_scene_not_a_mapping(self):
        with pytest.raises(SceneParseError):
            parse_scene(['objects'])


class TestParseFile:
    """Test loading scene files."""

    def test_json_file(self, tmp_path):
        path = tmp_path / "scene.json"
        path.write_text(json.dumps(basic_scene()))

        scene, _, _, _ = load_scene(str(path))
        assert len(scene) == 3

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "scene.yaml"
        path.write_text(
            "materials:\n"
            "  grey: {type: matte, color: [0.5, 0.5, 0.5]}\n"
            "objects:\n"
            "  - type: triangle\n"
            "    vertices: [[0, 0, -5], [1, 0, -5], [0, 1, -5]]\n"
            "    material: grey\n"
        )

        scene, _, _, _ = load_scene(str(path))
        assert len(scene) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(SceneParseError):
            load_scene(str(tmp_path / "nope.yaml"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(SceneParseError):
            load_scene(str(path))

    def test_unknown_suffix_reads_yaml(self, tmp_path):
        path = tmp_path / "scene.txt"
        path.write_text("render:\n  rays: 3\n")

        _, _, settings, _ = load_scene(str(path))
        assert settings.rays == 3

    def test_unknown_suffix_falls_back_to_json(self, tmp_path, monkeypatch):
        path = tmp_path / "scene.scn"
        path.write_text(json.dumps(basic_scene()))

        def reject(content):
            raise yaml.YAMLError("not yaml")

        monkeypatch.setattr(yaml, 'safe_load', reject)
        scene, _, _, _ = load_scene(str(path))
        assert len(scene) == 3

    def test_unknown_suffix_neither_format(self, tmp_path):
        path = tmp_path / "scene.scn"
        path.write_text("{objects: [unclosed")
        with pytest.raises(SceneParseError):
            load_scene(str(path))

    def test_malformed_file_reports_parse_error(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("materials:\nobjects:\n  - oops\n")
        with pytest.raises(SceneParseError):
            load_scene(str(path))

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(SceneParseError):
            load_scene(str(path))

    def test_bundled_example(self):
        scene, cameras, settings, environment = load_scene(str(SCENES_DIR / "lamp_room.yaml"))

        assert len(scene) == 5
        assert set(cameras) == {'front', 'side'}
        assert settings.rays == 4
        assert isinstance(environment, Sun)
        assert environment.background == Color(0.02, 0.02, 0.05)
