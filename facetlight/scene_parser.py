"""
Scene description language parser.

Supports a YAML (or JSON) scene description format with:
- Render settings
- Surfaces library
- Objects (triangles and parallelograms with surfaces)
- An optional sun
- Named cameras

Example scene file:
```yaml
render:
  width: 160
  height: 96
  rays: 6
  max_depth: 2

materials:
  floor:
    type: matte
    color: [0.4, 0.4, 0.4]

  lamp:
    type: light
    color: [4, 4, 4]

objects:
  - type: parallelogram
    corner: [-50, -5, 50]
    side_b: [100, 0, 0]
    side_c: [0, 0, -100]
    material: floor

  - type: triangle
    vertices: [[-1, 3, -9], [1, 3, -9], [0, 3, -11]]
    material: lamp

sun:
  direction: [1, 1, 1]
  color: [1, 1, 1]
  half_angle: 30

cameras:
  front:
    origin: [0, 0, 10]
    direction: [0, 0, -1]
    up: [0, 1, 0]
    aperture: 30
```
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, Any, Optional, Tuple
import json

import yaml

from .vec3 import Vec3, Color
from .camera import Camera
from .shapes import Triangle, DegenerateGeometryError, parallelogram
from .materials import Surface, Matte, Light
from .scene import Scene
from .environment import Environment, Sun
from .renderer import RenderSettings


class SceneParseError(Exception):
    """Error during scene parsing."""
    pass


class SceneParser:
    """Parser for scene description files."""

    def __init__(self):
        self.materials: Dict[str, Surface] = {}
        self.triangles: list[Triangle] = []
        self.cameras: Dict[str, Camera] = {}
        self.environment: Optional[Environment] = None
        self.settings: Optional[RenderSettings] = None

    def parse_file(self, filepath: str) -> Tuple[Scene, Dict[str, Camera], RenderSettings, Optional[Environment]]:
        """Parse a scene file.

        `.yaml`/`.yml` files are read with PyYAML and `.json` files with
        json. Any other suffix is tried as YAML first, then as JSON.

        Args:
            filepath: Path to the scene file (YAML or JSON)

        Returns:
            Tuple of (scene, cameras, settings, environment)
        """
        path = Path(filepath)
        if not path.exists():
            raise SceneParseError(f"Scene file not found: {filepath}")

        content = path.read_text()
        suffix = path.suffix.lower()

        try:
            if suffix == '.json':
                data = json.loads(content)
            elif suffix in ('.yaml', '.yml'):
                data = yaml.safe_load(content)
            else:
                try:
                    data = yaml.safe_load(content)
                except yaml.YAMLError:
                    data = json.loads(content)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise SceneParseError(f"Cannot read scene file {filepath}: {e}") from e

        return self.parse_dict(data)

    def parse_dict(self, data: Dict[str, Any]) -> Tuple[Scene, Dict[str, Camera], RenderSettings, Optional[Environment]]:
        """Parse a scene from a dictionary.

        Args:
            data: Scene description dictionary

        Returns:
            Tuple of (scene, cameras, settings, environment)

        Raises:
            SceneParseError: If any part of the description is malformed
        """
        self._expect(data, dict, "Scene")

        # Parse materials first (objects reference them)
        if 'materials' in data:
            self._parse_materials(data['materials'])

        if 'objects' in data:
            self._parse_objects(data['objects'])

        if 'sun' in data:
            self._parse_sun(data['sun'])

        if 'cameras' in data:
            self._parse_cameras(data['cameras'])
        else:
            self.cameras['front'] = Camera(
                origin=Vec3(0, 0, 10),
                direction=Vec3(0, 0, -1),
                up=Vec3(0, 1, 0),
                aperture=30.0
            )

        if 'render' in data:
            self._parse_settings(data['render'])
        else:
            self.settings = RenderSettings()

        return Scene(self.triangles), self.cameras, self.settings, self.environment

    def _expect(self, data: Any, kind: type, what: str) -> None:
        """Raise unless `data` is of the expected container type."""
        if not isinstance(data, kind):
            raise SceneParseError(f"{what} must be a {kind.__name__}, got: {data!r}")

    def _parse_number(self, data: Any, kind: type = float, what: str = "value") -> Any:
        """Convert a scalar with `kind`, reporting failures as parse errors."""
        try:
            return kind(data)
        except (TypeError, ValueError) as e:
            raise SceneParseError(f"Invalid {what}: {data!r}") from e

    def _parse_vec3(self, data: Any) -> Vec3:
        """Parse a Vec3 from various formats."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Vec3 must have 3 components, got {len(data)}")
            return Vec3(*(self._parse_number(c, what="vector component") for c in data))
        elif isinstance(data, dict):
            return Vec3(*(self._parse_number(data.get(k, 0), what="vector component") for k in 'xyz'))
        else:
            raise SceneParseError(f"Cannot parse Vec3 from: {data}")

    def _parse_color(self, data: Any) -> Color:
        """Parse a Color from various formats."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Color must have 3 components, got {len(data)}")
            return Color(*(self._parse_number(c, what="color component") for c in data))
        elif isinstance(data, dict):
            return Color(*(self._parse_number(data.get(k, 0), what="color component") for k in 'rgb'))
        elif isinstance(data, str):
            # Handle hex colors
            hex_color = data[1:]
            if data.startswith('#') and len(hex_color) == 6:
                try:
                    r, g, b = (int(hex_color[i:i + 2], 16) / 255.0 for i in (0, 2, 4))
                except ValueError as e:
                    raise SceneParseError(f"Cannot parse color from string: {data}") from e
                return Color(r, g, b)
            raise SceneParseError(f"Cannot parse color from string: {data}")
        else:
            raise SceneParseError(f"Cannot parse Color from: {data}")

    def _parse_type(self, data: Dict[str, Any], default: str) -> str:
        type_name = data.get('type', default)
        if not isinstance(type_name, str):
            raise SceneParseError(f"Type must be a string, got: {type_name!r}")
        return type_name.lower()

    def _make_surface(self, mat_data: Any) -> Surface:
        """Build a surface from a material definition."""
        self._expect(mat_data, dict, "Material")
        mat_type = self._parse_type(mat_data, 'matte')
        color = self._parse_color(mat_data.get('color', [1, 1, 1]))

        if mat_type == 'matte':
            return Matte(color)
        elif mat_type == 'light':
            return Light(color)
        else:
            raise SceneParseError(f"Unknown material type: {mat_type}")

    def _parse_materials(self, materials_data: Dict[str, Any]) -> None:
        """Parse materials section."""
        self._expect(materials_data, dict, "Materials section")
        for name, mat_data in materials_data.items():
            self.materials[name] = self._make_surface(mat_data)

    def _get_material(self, mat_ref: Any) -> Surface:
        """Get a material by name or inline definition."""
        if mat_ref is None:
            raise SceneParseError("Object has no material")
        if isinstance(mat_ref, str):
            if mat_ref not in self.materials:
                raise SceneParseError(f"Unknown material: {mat_ref}")
            return self.materials[mat_ref]
        elif isinstance(mat_ref, dict):
            return self._make_surface(mat_ref)
        else:
            raise SceneParseError(f"Invalid material reference: {mat_ref}")

    def _parse_objects(self, objects_data: list) -> None:
        """Parse objects section."""
        self._expect(objects_data, list, "Objects section")
        for index, obj_data in enumerate(objects_data):
            self._expect(obj_data, dict, f"Object {index}")
            obj_type = self._parse_type(obj_data, 'triangle')
            material = self._get_material(obj_data.get('material'))

            try:
                if obj_type == 'triangle':
                    vertices = obj_data.get('vertices')
                    if not isinstance(vertices, (list, tuple)) or len(vertices) != 3:
                        raise SceneParseError(f"Triangle {index} needs exactly 3 vertices")
                    v0, v1, v2 = (self._parse_vec3(v) for v in vertices)
                    self.triangles.append(Triangle(v0, v1, v2, material))

                elif obj_type == 'parallelogram':
                    corner = self._parse_vec3(obj_data['corner'])
                    side_b = self._parse_vec3(obj_data['side_b'])
                    side_c = self._parse_vec3(obj_data['side_c'])
                    self.triangles.extend(parallelogram(corner, side_b, side_c, material))

                else:
                    raise SceneParseError(f"Unknown object type: {obj_type}")

            except DegenerateGeometryError as e:
                raise SceneParseError(f"Object {index} is degenerate: {e}") from e
            except KeyError as e:
                raise SceneParseError(f"Object {index} is missing field {e}") from e

    def _parse_sun(self, sun_data: Dict[str, Any]) -> None:
        """Parse sun section."""
        self._expect(sun_data, dict, "Sun section")
        direction = self._parse_vec3(sun_data.get('direction', [1, 1, 1]))
        color = self._parse_color(sun_data.get('color', [1, 1, 1]))
        half_angle = self._parse_number(sun_data.get('half_angle', 30.0), what="sun half_angle")
        background = None
        if 'background' in sun_data:
            background = self._parse_color(sun_data['background'])

        self.environment = Sun(direction, color, half_angle, background)

    def _parse_cameras(self, cameras_data: Dict[str, Any]) -> None:
        """Parse cameras section."""
        if not cameras_data:
            raise SceneParseError("Cameras section is empty")
        self._expect(cameras_data, dict, "Cameras section")

        for name, camera_data in cameras_data.items():
            self._expect(camera_data, dict, f"Camera '{name}'")
            try:
                self.cameras[name] = Camera(
                    origin=self._parse_vec3(camera_data.get('origin', [0, 0, 10])),
                    direction=self._parse_vec3(camera_data.get('direction', [0, 0, -1])),
                    up=self._parse_vec3(camera_data.get('up', [0, 1, 0])),
                    aperture=self._parse_number(camera_data.get('aperture', 30.0), what="camera aperture")
                )
            except ValueError as e:
                raise SceneParseError(f"Camera '{name}' is invalid: {e}") from e

    def _parse_settings(self, settings_data: Dict[str, Any]) -> None:
        """Parse render settings section."""
        self._expect(settings_data, dict, "Render section")

        def setting(key: str, default: Any, kind: type = int) -> Any:
            return self._parse_number(settings_data.get(key, default), kind, f"render {key}")

        self.settings = RenderSettings(
            width=setting('width', 160),
            height=setting('height', 96),
            rays=setting('rays', 6),
            max_depth=setting('max_depth', 2),
            tile_size=setting('tile_size', 16),
            num_threads=setting('threads', 0),
            gamma=setting('gamma', 2.2, float)
        )


def load_scene(filepath: str) -> Tuple[Scene, Dict[str, Camera], RenderSettings, Optional[Environment]]:
    """Convenience function to load a scene file.

    Args:
        filepath: Path to the scene file

    Returns:
        Tuple of (scene, cameras, settings, environment)
    """
    parser = SceneParser()
    return parser.parse_file(filepath)


def parse_scene(data: Dict[str, Any]) -> Tuple[Scene, Dict[str, Camera], RenderSettings, Optional[Environment]]:
    """Convenience function to parse a scene from a dictionary.

    Args:
        data: Scene description dictionary

    Returns:
        Tuple of (scene, cameras, settings, environment)
    """
    parser = SceneParser()
    return parser.parse_dict(data)
