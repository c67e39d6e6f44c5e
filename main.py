#!/usr/bin/env python3
"""
LumenPath - A Python Monte Carlo Path Tracer

Main entry point for rendering scenes.
"""

import argparse
import os
import platform
import sys
import time
from pathlib import Path

from lumenpath.renderer import Renderer, RenderSettings
from lumenpath.scenes import SCENES


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='LumenPath - A Python Monte Carlo Path Tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --scene cornell --output cornell.png
  python main.py --scene sdf --width 640 --height 360 --samples 64
  python main.py --scene mandelbulb --samples 200 --seed 7 --output bulb.png
        '''
    )

    parser.add_argument('--width', type=int, default=400, help='Image width (default: 400)')
    parser.add_argument('--height', type=int, default=400, help='Image height (default: 400)')
    parser.add_argument('--samples', type=int, default=100, help='Samples per pixel (default: 100)')
    parser.add_argument('--depth', type=int, default=50, help='Max ray depth (default: 50)')
    parser.add_argument('--threads', type=int, default=0, help='Number of threads (0=auto)')
    parser.add_argument('--seed', type=int, default=None, help='Seed for a reproducible render')
    parser.add_argument('--output', type=str, default='output/render.png', help='Output filename')
    parser.add_argument('--scene', type=str, default='cornell', choices=sorted(SCENES),
                        help='Scene to render (default: cornell)')

    args = parser.parse_args()

    print("=" * 60)
    print("LumenPath Path Tracer")
    print("=" * 60)
    print(f"Platform: {platform.system()} {platform.machine()}")
    print(f"CPU Cores: {os.cpu_count()}")

    try:
        settings = RenderSettings(
            width=args.width,
            height=args.height,
            samples_per_pixel=args.samples,
            max_depth=args.depth,
            num_threads=args.threads,
            seed=args.seed
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print(f"\nRender Settings:")
    print(f"  Resolution: {settings.width}x{settings.height}")
    print(f"  Samples: {settings.samples_per_pixel}")
    print(f"  Max Depth: {settings.max_depth}")
    print(f"  Threads: {settings.num_threads}")
    print(f"  Seed: {settings.seed if settings.seed is not None else 'random'}")

    print(f"\nCreating scene: {args.scene}")
    scene = SCENES[args.scene](aspect_ratio=settings.width / settings.height)

    renderer = Renderer(settings)

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

    image = renderer.render(scene)

    elapsed = time.time() - start_time
    print(f"\nRender completed in {elapsed:.2f} seconds")
    print(f"  Paths per second: {(settings.width * settings.height * settings.samples_per_pixel) / elapsed:.0f}")

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    print(f"\nSaving to: {args.output}")
    renderer.save_image(image, args.output)

    print("\nDone!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
