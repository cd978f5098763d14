#!/usr/bin/env python3
"""
Generate a GIF of an image being carved seam by seam and then restored
by re-inserting the seams in reverse order.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import argparse

from PIL import Image

from seamgraph import AxisMode, CarvingConfig, CarvingEngine, ColorMode
from seamgraph.image_io import highlight, load_rgba, to_pil


def render_frame(engine, canvas_size, color_mode, color):
    """Current grid with the pending seam highlighted, pasted on a fixed canvas."""
    width, height, data = engine.current_buffer(color_mode)
    canvas = Image.new('RGB', canvas_size, (0, 0, 0))
    if width and height:
        painted = highlight(width, height, data, engine.marked_mask(), color)
        canvas.paste(to_pil(width, height, painted).convert('RGB'), (0, 0))
    return canvas


def generate_gif(image_path, output_path, seams, fps=10, axis_mode=AxisMode.WEIGHTED_RANDOM,
                 color_mode=ColorMode.COLOR, seed=0, max_side=200):
    """
    Carve `seams` seams from an image, then undo them, saving every step.

    Args:
        image_path: Input image
        output_path: Path to save the output GIF
        seams: Number of seams to remove before reversing
        fps: Frames per second for the GIF
        axis_mode: Axis selection policy
        color_mode: Paint colors or the energy map
        seed: Random seed for weighted axis selection
        max_side: Longest side the input is downscaled to
    """
    width, height, data = load_rgba(image_path, max_side=max_side)
    config = CarvingConfig(axis_mode=axis_mode, seed=seed, color_mode=color_mode)
    engine = CarvingEngine.from_rgba(width, height, data, config)

    print(f"Generating GIF for {image_path} ({width}x{height}, {seams} seams)...")
    frames = [render_frame(engine, (width, height), color_mode, config.highlight_color)]

    # Each seam takes two steps: mark, then remove
    for _ in range(2 * seams):
        engine.step()
        frames.append(render_frame(engine, (width, height), color_mode, config.highlight_color))
        if not engine.reversed and min(engine.dimensions()) == 0:
            break
    print(f"  Carved to {engine.dimensions()}, history depth {engine.history_depth()}")

    engine.set_direction(True)
    while engine.history_depth() or engine.pending is not None:
        engine.step()
        frames.append(render_frame(engine, (width, height), color_mode, config.highlight_color))
    print(f"  Restored to {engine.dimensions()}")

    duration = int(1000 / fps)
    print(f"Saving GIF to {output_path}...")
    frames[0].save(
        output_path,
        save_all=True,
        append_images=frames[1:],
        duration=duration,
        loop=0,
        optimize=False
    )

    print(f" GIF created successfully: {output_path}")
    print(f"  Frames: {len(frames)}, Duration: {len(frames) * duration / 1000:.1f}s")


def main():
    parser = argparse.ArgumentParser(
        description="Generate a carve-and-restore GIF"
    )
    parser.add_argument('image', type=str, help='Input image path')
    parser.add_argument(
        '--output',
        type=str,
        help='Output GIF filename (default: {image stem}.gif)'
    )
    parser.add_argument('--seams', type=int, default=40, help='Seams to remove (default: 40)')
    parser.add_argument('--fps', type=int, default=10, help='Frames per second (default: 10)')
    parser.add_argument(
        '--axis',
        choices=[mode.value for mode in AxisMode],
        default=AxisMode.WEIGHTED_RANDOM.value,
        help='Axis selection policy (default: weighted_random)'
    )
    parser.add_argument('--energy', action='store_true', help='Render the energy map')
    parser.add_argument('--seed', type=int, default=0, help='Random seed (default: 0)')
    parser.add_argument('--max-side', type=int, default=200,
                        help='Downscale the input to this longest side (default: 200)')

    args = parser.parse_args()

    output = args.output or f"{Path(args.image).stem}.gif"
    generate_gif(args.image, output, args.seams, fps=args.fps,
                 axis_mode=AxisMode(args.axis),
                 color_mode=ColorMode.ENERGY if args.energy else ColorMode.COLOR,
                 seed=args.seed, max_side=args.max_side)


if __name__ == "__main__":
    main()
