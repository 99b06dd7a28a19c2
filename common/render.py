"""
OpenCV glue: image decode/encode, edge rendering and display.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

import cv2
import numpy as np

from common.errors import InvalidImageError


def load_image(path: str | Path) -> np.ndarray:
    """
    Decode an image file into a BGR uint8 array.
    """
    path = Path(path)
    if not path.exists():
        raise InvalidImageError(f"Image not found: {path}")
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None:
        raise InvalidImageError(f"Failed to decode image: {path}")
    return image


def edges_to_image(edges: np.ndarray) -> np.ndarray:
    """
    Render an edge buffer as a 3-channel uint8 image (magnitudes clipped to 0-255).
    """
    gray = np.clip(edges, 0, 255).astype(np.uint8)
    return cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)


def save_image(image: np.ndarray, path: str | Path, compression: int = 9) -> bool:
    """
    Write an image; PNG compression level applies to .png paths.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    params = [cv2.IMWRITE_PNG_COMPRESSION, int(compression)]
    return bool(cv2.imwrite(str(path), image, params))


def show_images(images: Mapping[str, np.ndarray], wait_ms: int = 0) -> None:
    for title, img in images.items():
        cv2.imshow(title, img)
    cv2.waitKey(wait_ms)
    cv2.destroyAllWindows()
