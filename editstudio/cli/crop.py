"""editstudio CLI crop tool.

Positions an image inside the square crop mask and writes the export
without opening the desktop dialog.
"""

import argparse
import logging
import os
import sys
from dataclasses import replace
from typing import List, Optional

from editstudio.core.validation import parse_color
from editstudio.domain.errors import LoadError, RenderError
from editstudio.features.transform.engine import TransformEngine
from editstudio.infrastructure.encoding import encode_png
from editstudio.infrastructure.loaders.image_loader import load_image_file
from editstudio.kernel.system.config import DEFAULT_CROP_CONFIG
from editstudio.kernel.system.logging import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="editstudio-crop",
        description="Crop an image to a square at a fixed output resolution.",
    )
    parser.add_argument("input", help="Source image file")
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output PNG path (default: <input>_crop.png)",
    )
    parser.add_argument(
        "--zoom",
        type=float,
        default=1.0,
        help="Zoom relative to the cover scale; clamped to the allowed range",
    )
    parser.add_argument(
        "--offset",
        type=float,
        nargs=2,
        metavar=("X", "Y"),
        default=(0.0, 0.0),
        help="Image offset from the mask center, in display pixels",
    )
    parser.add_argument(
        "--output-size",
        type=int,
        default=DEFAULT_CROP_CONFIG.output_size,
        help="Side of the exported square in pixels",
    )
    parser.add_argument(
        "--mask-size",
        type=int,
        default=DEFAULT_CROP_CONFIG.mask_size,
        help="Side of the crop mask in display pixels",
    )
    parser.add_argument(
        "--background",
        default=DEFAULT_CROP_CONFIG.export_background,
        help="Fill colour behind transparent or uncovered pixels",
    )
    parser.add_argument(
        "--preview",
        default=None,
        help="Also write the annotated preview canvas to this path",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def default_output_path(input_path: str) -> str:
    root, _ = os.path.splitext(input_path)
    return f"{root}_crop.png"


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns 0 on success, 1 on failure."""
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        parse_color(args.background)
        config = replace(
            DEFAULT_CROP_CONFIG,
            mask_size=args.mask_size,
            canvas_size=max(DEFAULT_CROP_CONFIG.canvas_size, args.mask_size),
            output_size=args.output_size,
            export_background=args.background,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    engine = TransformEngine(config)

    try:
        engine.initialize(load_image_file(args.input))
    except LoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    engine.set_scale(engine.min_scale * args.zoom)
    engine.set_offset(*args.offset)

    out_path = args.output or default_output_path(args.input)
    try:
        asset = engine.export_crop()
        out_dir = os.path.dirname(os.path.abspath(out_path))
        os.makedirs(out_dir, exist_ok=True)
        with open(out_path, "wb") as f:
            f.write(asset.data)

        if args.preview:
            surface = engine.new_surface()
            engine.render_preview(surface)
            with open(args.preview, "wb") as f:
                f.write(encode_png(surface))
    except (RenderError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    x1, y1, x2, y2 = engine.visible_source_rect()
    print(
        f"{args.input} -> {out_path} ({args.output_size}px, "
        f"source region {x1:.1f},{y1:.1f} - {x2:.1f},{y2:.1f})",
        file=sys.stderr,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
