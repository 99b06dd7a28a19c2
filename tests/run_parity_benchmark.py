"""
Parity benchmark: sequential vs parallel edge engine on synthetic images of several sizes.

Writes outputs/parity_benchmark.csv and outputs/parity_benchmark_report.txt.
"""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import numpy as np

from common.config import ensure_output_dirs, load_config
from common.driver import run_comparison
from common.engine_dispatch import open_parallel_engine
from tests.helpers import random_image, write_csv

SIZES = [(64, 64), (128, 192), (240, 320), (480, 640)]


def main() -> None:
    cfg = load_config()
    ensure_output_dirs(cfg)

    csv_path = Path("outputs/parity_benchmark.csv")
    report_path = Path("outputs/parity_benchmark_report.txt")

    rows = []
    all_equal = True

    with open_parallel_engine(cfg) as engine:
        for idx, (h, w) in enumerate(SIZES):
            image = random_image(h, w, seed=idx)
            report = run_comparison(image, cfg, engine)
            cmp = report.comparison
            all_equal = all_equal and cmp.equivalent
            rows.append([
                w,
                h,
                cmp.mismatch_count,
                report.t_sequential_ms,
                report.t_parallel_ms,
                report.parallel_timings.get("t_compute_ms", 0.0),
                report.speedup,
            ])
            print(f"{w}x{h}: mismatches={cmp.mismatch_count} speedup={report.speedup:.2f}x")

        engine_desc = engine.describe()

    write_csv(
        csv_path,
        [
            "width",
            "height",
            "mismatches",
            "t_sequential_ms",
            "t_parallel_ms",
            "t_parallel_compute_ms",
            "speedup",
        ],
        rows,
    )

    speedups = [r[-1] for r in rows]
    report_lines = [
        "Parity Benchmark: sequential vs parallel Sobel edge map",
        "=" * 70,
        "",
        f"parallel_engine: {engine_desc}",
        f"sizes: {', '.join(f'{w}x{h}' for h, w in SIZES)}",
        "",
        "Per-size results:",
    ]
    for w, h, mism, t_seq, t_par, t_comp, speedup in rows:
        status = "PASS" if mism == 0 else "FAIL"
        report_lines.append(
            f"  {w}x{h}: seq={t_seq:.3f} ms, par={t_par:.3f} ms (compute {t_comp:.3f} ms), "
            f"speedup={speedup:.2f}x [{status}]"
        )
    report_lines.extend([
        "",
        f"mean_speedup: {float(np.mean(speedups)):.2f}x",
        f"Overall: {'PASS' if all_equal else 'FAIL'}",
    ])

    report_path.write_text("\n".join(report_lines))
    print(f"Parity benchmark complete: {csv_path}")
    print(f"Report: {report_path}")
    print(f"Overall: {'PASS' if all_equal else 'FAIL'}")


if __name__ == "__main__":
    main()
