from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, Sequence

import numpy as np


def write_csv(path: Path, header: Sequence[str], rows: Iterable[Sequence]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for row in rows:
            writer.writerow(row)


def flat_image(h: int, w: int, bgr=(90, 120, 150)) -> np.ndarray:
    img = np.empty((h, w, 3), dtype=np.uint8)
    img[:, :] = bgr
    return img


def random_image(h: int, w: int, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(h, w, 3), dtype=np.uint8)


def step_intensity(h: int, w: int, col: int, low: int = 0, high: int = 100) -> np.ndarray:
    """Vertical step edge: columns < col are `low`, columns >= col are `high`."""
    buf = np.full((h, w), low, dtype=np.int16)
    buf[:, col:] = high
    return buf


def impulse_intensity(h: int, w: int, y: int, x: int, background: int = 10, peak: int = 200) -> np.ndarray:
    buf = np.full((h, w), background, dtype=np.int16)
    buf[y, x] = peak
    return buf
