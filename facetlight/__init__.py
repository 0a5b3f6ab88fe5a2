"""
facetlight - A deterministic light-gathering renderer for triangle scenes

Renders images by tracing rays through a flat list of triangles:
- Exact ray-triangle intersection with a linear nearest-hit search
- Recursive, depth-bounded gathering over a fixed fan of directions
- Matte and light surfaces behind an open Surface interface
- Optional sun environment for rays that leave the scene
- Multi-threaded tile rendering, PNG output, YAML/JSON scene files
"""

__version__ = "0.1.0"
__author__ = "facetlight Team"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .shapes import Plane, Hit, Triangle, DegenerateGeometryError, nearest_hit, parallelogram
from .materials import Surface, Matte, Light
from .scene import Scene
from .environment import Environment, Sun
from .tracer import Tracer, sample_directions
from .camera import Camera
from .renderer import Renderer, RenderSettings, compose_views
from .scene_parser import SceneParser, SceneParseError, load_scene, parse_scene
