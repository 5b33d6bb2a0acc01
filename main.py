#!/usr/bin/env python3
"""
Glimmer - A Python Ray Tracing Renderer

Main entry point for rendering scenes.
"""

import argparse
import logging
import sys
import time
from pathlib import Path

import numpy as np

from glimmer.renderer import Renderer, RenderSettings
from glimmer.scenes import SCENES, SceneError, load_scene


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Glimmer - A Python Ray Tracing Renderer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --scene random --output render.ppm
  python main.py --scene cornell --width 300 --height 300 --samples 50 --output cornell.png
  python main.py --scene earth --texture earthmap.jpg --output earth.ppm
        '''
    )

    parser.add_argument('--width', type=int, default=400, help='Image width (default: 400)')
    parser.add_argument('--height', type=int, default=225, help='Image height (default: 225)')
    parser.add_argument('--samples', type=int, default=0,
                        help='Samples per pixel (default: the scene\'s own setting)')
    parser.add_argument('--depth', type=int, default=50, help='Max ray depth (default: 50)')
    parser.add_argument('--threads', type=int, default=0, help='Number of threads (0=auto)')
    parser.add_argument('--seed', type=int, default=None, help='Random seed for a reproducible render')
    parser.add_argument('--output', type=str, default='output/render.ppm', help='Output filename')
    parser.add_argument('--scene', type=str, default='random', choices=sorted(SCENES),
                        help='Scene to render (default: random)')
    parser.add_argument('--texture', type=str, default=None,
                        help='Image file for the earth/final scenes')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(name)s %(levelname)s: %(message)s'
    )

    print("=" * 60)
    print("Glimmer Ray Tracer")
    print("=" * 60)

    rng = np.random.default_rng(args.seed)
    scene_options = {}
    if args.texture is not None and args.scene in ('earth', 'final'):
        scene_options['texture_file'] = args.texture

    print(f"\nCreating scene: {args.scene}")
    try:
        scene = load_scene(args.scene, rng, **scene_options)
    except (SceneError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    settings = RenderSettings(
        width=args.width,
        height=args.height,
        samples_per_pixel=args.samples or scene.samples_per_pixel,
        max_depth=args.depth,
        num_threads=args.threads,
        background=scene.background,
        seed=args.seed
    )

    print(f"\nRender Settings:")
    print(f"  Resolution: {settings.width}x{settings.height}")
    print(f"  Samples: {settings.samples_per_pixel}")
    print(f"  Max Depth: {settings.max_depth}")
    print(f"  Threads: {settings.num_threads}")

    camera = scene.camera(settings.aspect_ratio)
    renderer = Renderer(settings)

    # Progress tracking
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

    print("\nRendering...")
    start_time = time.time()

    image = renderer.render(scene.world, camera)

    elapsed = time.time() - start_time
    print(f"\nRender completed in {elapsed:.2f} seconds")
    print(f"  Samples per second: {(settings.width * settings.height * settings.samples_per_pixel) / elapsed:.0f}")

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    print(f"\nSaving to: {args.output}")
    renderer.save_image(image, str(output_path))

    print("\nDone!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
