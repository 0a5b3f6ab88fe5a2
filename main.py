#!/usr/bin/env python3
"""
facetlight - A deterministic light-gathering renderer

Main entry point for rendering scenes.
"""

import argparse
import sys
import time
from dataclasses import replace
from pathlib import Path

from facetlight.vec3 import Vec3, Color, Point3
from facetlight.camera import Camera
from facetlight.shapes import Triangle
from facetlight.materials import Matte
from facetlight.scene import Scene
from facetlight.environment import Sun
from facetlight.renderer import Renderer, RenderSettings, compose_views
from facetlight.scene_parser import SceneParseError, load_scene


def create_demo_scene() -> Scene:
    """Four coloured triangles floating over a floor."""
    red = Matte(Color(0.5, 0.02, 0.02))
    blue = Matte(Color(0.02, 0.02, 0.5))
    green = Matte(Color(0.02, 0.5, 0.02))
    yellow = Matte(Color(0.4, 0.4, 0.02))
    floor = Matte(Color(0.4, 0.4, 0.4))

    return Scene([
        Triangle(Point3(2, 1, -8), Point3(0, 0, -10), Point3(-1, 1, -9), red),
        Triangle(Point3(1, 1, -12), Point3(0, 3, -8), Point3(-3, -3, -8), blue),
        Triangle(Point3(2, 0, -8), Point3(2, 0, -15), Point3(1.5, -3, -15), green),
        Triangle(Point3(-2, -1, -2), Point3(-1, 2, -12), Point3(1.5, -2, -5), yellow),
        # Floor
        Triangle(Point3(-50, -5, 50), Point3(-50, -5, -50), Point3(50, -5, -50), floor),
        Triangle(Point3(50, -5, -50), Point3(50, -5, 50), Point3(-50, -5, 50), floor),
    ])


def create_demo_cameras() -> dict:
    """Four views around the demo scene."""
    up = Vec3(0, 1, 0)
    return {
        'front': Camera(Point3(0, 0, 10), Vec3(0, 0, -1), up, 30.0),
        'back': Camera(Point3(0, 0, -25), Vec3(0, 0, 1), up, 30.0),
        'right': Camera(Point3(20, 0, -10), Vec3(-1, 0, 0), up, 30.0),
        'left': Camera(Point3(-20, 0, -10), Vec3(1, 0, 0), up, 30.0),
    }


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='facetlight - A deterministic light-gathering renderer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --output render.png
  python main.py --view all --rays 4 --depth 2 --output sheet.png
  python main.py --scene room.yaml --view front --output room.png
        '''
    )

    parser.add_argument('--scene', type=str, default=None,
                        help='Scene file (YAML or JSON); built-in demo if omitted')
    parser.add_argument('--view', type=str, default='front',
                        help="Camera to render, or 'all' for a composite sheet (default: front)")
    parser.add_argument('--width', type=int, default=None, help='Image width')
    parser.add_argument('--height', type=int, default=None, help='Image height')
    parser.add_argument('--rays', type=int, default=None, help='Angle steps per axis of the gather fan')
    parser.add_argument('--depth', type=int, default=None, help='Max bounce depth')
    parser.add_argument('--threads', type=int, default=None, help='Number of threads (0=auto)')
    parser.add_argument('--output', type=str, default='output/render.png', help='Output filename')

    args = parser.parse_args()

    print("=" * 60)
    print("facetlight Renderer")
    print("=" * 60)

    if args.scene:
        print(f"\nLoading scene: {args.scene}")
        try:
            scene, cameras, settings, environment = load_scene(args.scene)
        except SceneParseError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
    else:
        print("\nCreating scene: demo")
        scene = create_demo_scene()
        cameras = create_demo_cameras()
        settings = RenderSettings()
        environment = Sun(Vec3(1, 1, 1), Color(1, 1, 1), half_angle=30.0)

    # Command line overrides the scene file
    overrides = {
        'width': args.width,
        'height': args.height,
        'rays': args.rays,
        'max_depth': args.depth,
        'num_threads': args.threads,
    }
    settings = replace(settings, **{k: v for k, v in overrides.items() if v is not None})

    if args.view == 'all':
        views = list(cameras)
    elif args.view in cameras:
        views = [args.view]
    else:
        print(f"Error: unknown view '{args.view}' (available: {', '.join(cameras)})", file=sys.stderr)
        return 1

    print(f"  Triangles in scene: {len(scene)}")
    print(f"\nRender Settings:")
    print(f"  Resolution: {settings.width}x{settings.height}")
    print(f"  Directions per bounce: {settings.rays ** 2}")
    print(f"  Max Depth: {settings.max_depth}")
    print(f"  Threads: {settings.num_threads}")

    renderer = Renderer(settings)
    try:
        tracer = renderer.make_tracer(environment)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    last_progress = [0]

    def progress_callback(progress: float):
        pct = int(progress * 100)
        if pct > last_progress[0]:
            last_progress[0] = pct
            bar_len = 40
            filled = int(bar_len * progress)
            bar = '█' * filled + '░' * (bar_len - filled)
            print(f'\rRendering: [{bar}] {pct}%', end='', flush=True)

    renderer.set_progress_callback(progress_callback)

    images = []
    start_time = time.time()

    for view in views:
        print(f"\nView: {view}")
        last_progress[0] = 0
        hdr = renderer.render(scene, cameras[view], tracer)
        images.append(renderer.to_ldr(hdr))

    elapsed = time.time() - start_time
    print(f"\nRender completed in {elapsed:.2f} seconds")

    image = images[0] if len(images) == 1 else compose_views(images, columns=2)

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    print(f"\nSaving to: {args.output}")
    renderer.save_image(image, args.output)

    print("\nDone!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
