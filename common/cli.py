"""
Command-line entry point: compare the sequential and parallel edge engines on one image.

Exit status: 0 engines agree, 1 engines disagree, 2 run failed.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from common.config import (
    DEFAULT_CONFIG_PATH,
    LOCAL_CONFIG_PATH,
    apply_overrides,
    ensure_output_dirs,
    get_section,
    load_config,
)
from common.driver import export_results, format_report, run_comparison
from common.engine_dispatch import BACKENDS
from common.errors import EdgeParityError, InvalidImageError
from common.render import load_image

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_MISMATCH = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="edge-parity",
        description="Compute a Sobel edge map sequentially and on a parallel engine, "
        "verify both are identical and report the speed-up.",
    )
    parser.add_argument("image", nargs="?", type=Path, default=None,
                        help="input image (default: input.image_path from config)")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH,
                        help="base JSON config")
    parser.add_argument("--local-config", type=Path, default=LOCAL_CONFIG_PATH,
                        help="optional JSON overrides merged on top of --config")
    parser.add_argument("--backend", choices=BACKENDS, default=None,
                        help="parallel engine backend")
    parser.add_argument("--device", type=int, default=None, help="CUDA device id")
    parser.add_argument("--tile-size", type=int, default=None, help="tile edge for the 'tiles' backend")
    parser.add_argument("--workers", type=int, default=None, help="thread count for the 'tiles' backend")
    parser.add_argument("--output", type=Path, default=None, help="edge map PNG path")
    parser.add_argument("--save-both", action="store_true", default=None,
                        help="also write the parallel engine's edge map")
    parser.add_argument("--show", action="store_true", default=None, help="display both edge maps")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = load_config(args.config, args.local_config)
        cfg = apply_overrides(cfg, {
            "input.image_path": str(args.image) if args.image else None,
            "parallel.backend": args.backend,
            "parallel.device_id": args.device,
            "parallel.tile_size": args.tile_size,
            "parallel.workers": args.workers,
            "outputs.edges_png": str(args.output) if args.output else None,
            "outputs.save_both": args.save_both,
            "display.enabled": args.show,
        })
        ensure_output_dirs(cfg)

        image_path = get_section(cfg, "input").get("image_path")
        if not image_path:
            raise InvalidImageError("No input image: pass a path or set input.image_path in the config")
        image = load_image(image_path)
        report = run_comparison(image, cfg)
        written = export_results(report, cfg)
    except (EdgeParityError, OSError, ValueError, MemoryError) as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        print(f"edge-parity: {type(exc).__name__}: {exc}", file=sys.stderr)
        return EXIT_ERROR

    print(format_report(report))
    for path in written:
        print(f"Wrote: {path}")
    return EXIT_OK if report.comparison.equivalent else EXIT_MISMATCH


if __name__ == "__main__":
    sys.exit(main())
