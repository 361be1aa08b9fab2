#!/usr/bin/env python3
"""
Batch recolor: replace one color in every image of the given files / folders.

    pixel-recolor photos/ logo.png --target "#ff0000" --replacement "#0000ff" --tolerance 0.1
"""
from __future__ import annotations
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Iterator, List

from dotenv import load_dotenv
from tqdm import tqdm

# Load environment variables first
load_dotenv()

from ..models.errors import EngineError
from ..models.image import Image
from ..models.recolor_engine import RecolorEngine
from ..pipeline.color_replacer import replace_color, OUTPUT_DIR
from ..services.image_service import ImageService
from ..services.recolor_service import RecolorService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="pixel-recolor",
        description="Replace every pixel close to a target color with a replacement color.",
    )
    p.add_argument("inputs", nargs="+", help="Image files or directories")
    p.add_argument("--target", required=True, help="Color to replace, #RRGGBB or #RRGGBBAA")
    p.add_argument("--replacement", required=True, help="New color, #RRGGBB or #RRGGBBAA")
    p.add_argument("--tolerance", type=float, default=None,
                   help="Max per-channel difference in [0, 1] (default: RECOLOR_DEFAULT_TOLERANCE or 0.5)")
    p.add_argument("--output-dir", default=OUTPUT_DIR, help="Where recolored images are written")
    p.add_argument("--ext", default=os.getenv("OUTPUT_IMG_EXT", ".png"), help="Output file extension")
    p.add_argument("--recursive", action="store_true", help="Descend into sub-directories")
    p.add_argument("--workers", type=int, default=None, help="Worker threads per image")
    p.add_argument("-v", "--verbose", action="store_true", help="DEBUG logging")
    return p


def iter_inputs(inputs: List[str], image_service: ImageService, recursive: bool) -> Iterator[Path | Image]:
    """Yield loaded Images, or the Path of an input that could not be loaded."""
    for raw in inputs:
        path = Path(raw)
        if path.is_dir():
            yield from image_service.stream_gallery(path, recursive=recursive)
            continue
        try:
            yield image_service.load(path)
        except (FileNotFoundError, ValueError) as err:
            logger.error(f"Cannot load {path}: {err}")
            yield path


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # --- Centralized Logging Configuration ---
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )

    image_service = ImageService()
    try:
        recolor_service = RecolorService(
            engine=RecolorEngine(max_workers=args.workers),
            image_service=image_service,
        )
        request = recolor_service.build_request(args.target, args.replacement, args.tolerance)
    except ValueError as err:
        logger.error(f"Invalid parameters: {err}")
        return 2

    failures = 0
    done = 0
    for item in tqdm(iter_inputs(args.inputs, image_service, args.recursive), desc="Recoloring", unit="img"):
        if isinstance(item, Path):
            failures += 1
            continue
        try:
            [img] = replace_color([item], request,
                                  recolor_service=recolor_service,
                                  image_service=image_service,
                                  output_dir=args.output_dir,
                                  ext=args.ext)
            image_service.save(img)
            done += 1
        except (EngineError, OSError, ValueError) as err:
            logger.error(f"Failed on {item.path}: {err}")
            failures += 1

    logger.info(f"Recolored {done} images, {failures} failed. Output: {args.output_dir}")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
