"""
One comparison run: extract intensity, time both engines, check equivalence, export.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import cv2
import numpy as np

from common.config import get_section
from common.engine_dispatch import ParallelEngine, open_parallel_engine
from common.equivalence import ComparisonResult, compare_edge_buffers
from common.intensity import extract_intensity
from common.render import edges_to_image, save_image, show_images
from common.timing import Stopwatch
from cpu.edges import cpu_gradient_edges

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    width: int
    height: int
    engine: str
    t_intensity_ms: float
    t_sequential_ms: float
    t_parallel_ms: float
    parallel_timings: Dict[str, Any]
    comparison: ComparisonResult
    sequential_edges: np.ndarray = field(repr=False)
    parallel_edges: np.ndarray = field(repr=False)

    @property
    def speedup(self) -> float:
        """Sequential time over parallel time (transfer included)."""
        if self.t_parallel_ms <= 0:
            return 0.0
        return self.t_sequential_ms / self.t_parallel_ms


def run_comparison(
    image: np.ndarray,
    cfg: Dict[str, Any],
    engine: Optional[ParallelEngine] = None,
) -> RunReport:
    """
    Run both engines on one image and compare their outputs.

    If `engine` is None one is opened from cfg and closed afterwards. The
    parallel timing brackets copy-in, compute and copy-out.
    """
    if engine is None:
        with open_parallel_engine(cfg) as owned:
            return run_comparison(image, cfg, owned)

    max_report = int(get_section(cfg, "compare").get("max_report", 10))

    with Stopwatch() as sw_int:
        intensity = extract_intensity(image)
    h, w = intensity.shape
    logger.info("Intensity buffer %dx%d extracted in %.3f ms", w, h, sw_int.elapsed_ms)

    with Stopwatch() as sw_seq:
        seq_edges = cpu_gradient_edges(intensity)
    logger.info("Sequential engine: %.3f ms", sw_seq.elapsed_ms)

    with Stopwatch() as sw_par:
        par_edges, par_timings = engine.run(intensity)
    logger.info("Parallel engine (%s): %.3f ms", engine.backend, sw_par.elapsed_ms)

    comparison = compare_edge_buffers(seq_edges, par_edges, max_report=max_report)
    if not comparison.equivalent:
        logger.warning(
            "Engines disagree on %d of %d cells", comparison.mismatch_count, comparison.total_cells
        )

    return RunReport(
        width=w,
        height=h,
        engine=engine.describe(),
        t_intensity_ms=sw_int.elapsed_ms,
        t_sequential_ms=sw_seq.elapsed_ms,
        t_parallel_ms=sw_par.elapsed_ms,
        parallel_timings=par_timings,
        comparison=comparison,
        sequential_edges=seq_edges,
        parallel_edges=par_edges,
    )


def export_results(report: RunReport, cfg: Dict[str, Any]) -> List[Path]:
    """
    Write the rendered edge map(s) and the text report; optionally display them.
    """
    outputs = get_section(cfg, "outputs")
    display = get_section(cfg, "display")
    compression = int(outputs.get("png_compression", 9))

    seq_img = edges_to_image(report.sequential_edges)
    par_img = edges_to_image(report.parallel_edges)

    targets = [(Path(outputs.get("edges_png", "outputs/edges.png")), seq_img)]
    if outputs.get("save_both") and outputs.get("parallel_edges_png"):
        targets.append((Path(outputs["parallel_edges_png"]), par_img))

    written: List[Path] = []
    for path, img in targets:
        if not save_image(img, path, compression):
            raise OSError(f"Failed to write image: {path}")
        written.append(path)

    if outputs.get("report_txt"):
        report_path = Path(outputs["report_txt"])
        report_path.parent.mkdir(parents=True, exist_ok=True)
        report_path.write_text(format_report(report) + "\n", encoding="utf-8")
        written.append(report_path)

    if display.get("enabled"):
        try:
            show_images(
                {"Sequential edges": seq_img, "Parallel edges": par_img},
                wait_ms=int(display.get("wait_ms", 0)),
            )
        except cv2.error as exc:
            # Display is best effort; files are already written.
            logger.warning("Could not display edge maps: %s", exc)

    return written


def format_report(report: RunReport) -> str:
    cmp = report.comparison
    lines = [
        "Edge Parity: sequential vs parallel gradient edge map",
        "=" * 60,
        "",
        f"image: {report.width}x{report.height}",
        f"parallel_engine: {report.engine}",
        "",
        "Timing (ms):",
        f"  intensity: {report.t_intensity_ms:.4f}",
        f"  sequential: {report.t_sequential_ms:.4f}",
        f"  parallel (incl. transfer): {report.t_parallel_ms:.4f}",
    ]
    for key in sorted(report.parallel_timings):
        value = report.parallel_timings[key]
        if isinstance(value, float):
            lines.append(f"    {key}: {value:.4f}")
        else:
            lines.append(f"    {key}: {value}")
    lines.extend([
        f"  speedup (sequential / parallel): {report.speedup:.2f}x",
        "",
        "Equivalence:",
        f"  cells: {cmp.total_cells}",
        f"  mismatches: {cmp.mismatch_count}",
    ])
    for m in cmp.mismatches:
        lines.append(f"    ({m.row}, {m.col}): sequential={m.left} parallel={m.right}")
    lines.extend([
        "",
        f"Overall: {'PASS' if cmp.equivalent else 'FAIL'}",
    ])
    return "\n".join(lines)
