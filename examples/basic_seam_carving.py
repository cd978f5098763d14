"""
Basic seam carving example.

Shrinks an image to a target size, saves the result, and shows the
first seam and the carved image next to the original.
"""

import sys
sys.path.insert(0, '..')

import argparse
import logging

import matplotlib.pyplot as plt
import numpy as np

from seamgraph import AxisMode, CarvingConfig, CarvingEngine, ColorMode
from seamgraph.image_io import highlight, load_rgba, save_rgba


def as_array(width, height, data):
    return np.frombuffer(data, dtype=np.uint8).reshape(height, width, 4)


def main():
    parser = argparse.ArgumentParser(description="Content-aware resize of an image")
    parser.add_argument('image', help='Input image path')
    parser.add_argument('--width', type=int, help='Target width (default: 75%% of input)')
    parser.add_argument('--height', type=int, help='Target height (default: input height)')
    parser.add_argument('--output', default='../output/carved.png', help='Output path')
    parser.add_argument('--seed', type=int, default=0, help='Random seed for axis choice')
    parser.add_argument('--max-side', type=int, default=800,
                        help='Downscale inputs whose longest side exceeds this')
    parser.add_argument('--no-plot', action='store_true', help='Skip the matplotlib figure')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')

    print("Loading image...")
    width, height, data = load_rgba(args.image, max_side=args.max_side)
    print(f"Image size: {width} x {height}")

    config = CarvingConfig(seed=args.seed, axis_mode=AxisMode.VERTICAL)
    engine = CarvingEngine.from_rgba(width, height, data, config)

    # One step marks the first seam without removing it
    engine.step()
    with_seam = highlight(width, height, data, engine.marked_mask(), config.highlight_color)
    energy = engine.current_buffer(ColorMode.ENERGY)

    target_w = args.width or max(1, width * 3 // 4)
    target_h = args.height or height
    print(f"Carving to {target_w} x {target_h}...")
    removed = engine.resize_to_target(target_w, target_h)
    print(f"  Removed {removed} seams, size: {engine.dimensions()}")

    carved = engine.current_buffer()
    save_rgba(args.output, *carved)
    print(f"Saved: {args.output}")

    if args.no_plot:
        return

    fig, axes = plt.subplots(1, 3, figsize=(15, 5))
    panels = [
        ("Original with first seam", as_array(width, height, with_seam)),
        ("Energy", as_array(*energy)),
        (f"Carved ({carved[0]} x {carved[1]})", as_array(*carved)),
    ]
    for ax, (title, image) in zip(axes, panels):
        ax.imshow(image)
        ax.set_title(title)
        ax.axis('off')
    plt.tight_layout()
    plt.show()


if __name__ == '__main__':
    main()
