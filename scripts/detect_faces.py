#!/usr/bin/env python3
"""CLI for locating (and optionally confirming) face regions in still images."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pandas as pd
from tqdm import tqdm

from skintone.classifier.face_classifier import FaceClassifier
from skintone.config import DetectorConfig, config_from_dict, load_detector_config
from skintone.detector import SkinToneFaceDetector
from skintone.io_utils import dump_json, ensure_dir, expand_image_paths, load_rgb_pixels, save_rgb_pixels, setup_logging
from skintone.types import Rectangle
from skintone.viz.overlay import CANDIDATE_COLOUR, CONFIRMED_COLOUR, draw_regions


LOGGER = logging.getLogger("scripts.detect_faces")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Find possible face regions using skin tone heuristics")
    parser.add_argument("images", type=Path, nargs="+", help="Image files or directories of images")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("data/outputs"),
        help="Directory for annotated images and region exports",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Detector configuration YAML (defaults built in when omitted)",
    )
    parser.add_argument(
        "--model",
        type=Path,
        default=None,
        help="Serialised linear SVM used to confirm candidate regions",
    )
    parser.add_argument(
        "--sample-size",
        type=int,
        nargs=2,
        default=(128, 128),
        metavar=("WIDTH", "HEIGHT"),
        help="Size candidate regions are resized to before classification",
    )
    parser.add_argument("--cell-size", type=int, default=8, help="HOG cell size in pixels")
    parser.add_argument("--max-dimension", type=int, default=None, help="Override maximum image dimension")
    parser.add_argument("--expansions", type=int, default=None, help="Override relaxed mask expansion count")
    parser.add_argument("--pad", type=float, default=None, help="Override fraction to pad final regions by")
    parser.add_argument(
        "--save-progress",
        action="store_true",
        help="Write intermediate hue/saturation/texture and mask images",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _resolve_config(args: argparse.Namespace, base: DetectorConfig) -> DetectorConfig:
    """Apply CLI overrides on top of the YAML/default config."""
    overrides: Dict[str, object] = {
        "maximum_image_dimension": args.max_dimension,
        "number_of_relaxed_expansions": args.expansions,
        "percent_to_expand_final_region_by": args.pad,
    }
    if args.save_progress:
        overrides["save_progress_images"] = True
        overrides["progress_image_dir"] = args.output_dir / "progress"
    return config_from_dict(overrides, base=base)


def regions_to_records(
    image_path: Path,
    regions: List[Rectangle],
    scores: Optional[List[float]] = None,
) -> List[Dict[str, object]]:
    records: List[Dict[str, object]] = []
    for index, region in enumerate(regions):
        record: Dict[str, object] = {"image": str(image_path), "region": index, **region.to_dict()}
        if scores is not None:
            record["score"] = scores[index]
            record["is_face"] = scores[index] >= 0.0
        records.append(record)
    return records


def process_image(
    image_path: Path,
    detector: SkinToneFaceDetector,
    classifier: Optional[FaceClassifier],
    output_dir: Path,
) -> List[Dict[str, object]]:
    pixels = load_rgb_pixels(image_path)
    regions = detector.get_possible_face_regions(pixels)

    scores: Optional[List[float]] = None
    annotated = draw_regions(pixels, regions, colour=CANDIDATE_COLOUR)
    if classifier is not None:
        results = classifier.classify_regions(pixels, regions)
        scores = [score for _, score, _ in results]
        confirmed = [region for region, _, is_face in results if is_face]
        annotated = draw_regions(annotated, confirmed, colour=CONFIRMED_COLOUR)
        LOGGER.info("%s: %d of %d region(s) confirmed as faces", image_path.name, len(confirmed), len(regions))

    save_rgb_pixels(output_dir / f"{image_path.stem}-regions.png", annotated)
    return regions_to_records(image_path, regions, scores)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    config = _resolve_config(args, load_detector_config(args.config))
    output_dir = ensure_dir(args.output_dir)
    started = time.perf_counter()

    def progress(message: str) -> None:
        LOGGER.debug("[%dms] %s", int((time.perf_counter() - started) * 1000), message)

    detector = SkinToneFaceDetector(config, progress=progress)
    classifier = None
    if args.model is not None:
        classifier = FaceClassifier.from_file(args.model, sample_size=tuple(args.sample_size), cell_size=args.cell_size)

    image_paths = expand_image_paths(args.images)
    if not image_paths:
        LOGGER.error("No images found in %s", [str(p) for p in args.images])
        return 1

    records: List[Dict[str, object]] = []
    failures = 0
    for image_path in tqdm(image_paths, desc="Detecting", unit="image"):
        try:
            records.extend(process_image(image_path, detector, classifier, output_dir))
        except Exception:
            failures += 1
            LOGGER.exception("Failed to process %s", image_path)

    dump_json(output_dir / "regions.json", records)
    pd.DataFrame(
        records,
        columns=["image", "region", "x", "y", "width", "height"] + (["score", "is_face"] if classifier else []),
    ).to_csv(output_dir / "regions.csv", index=False)
    LOGGER.info(
        "Processed %d image(s), %d region(s), %d failure(s) -> %s",
        len(image_paths),
        len(records),
        failures,
        output_dir,
    )
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
