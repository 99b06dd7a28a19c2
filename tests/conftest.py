"""Pytest configuration and shared fixtures for edge-parity tests."""

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from common.engine_dispatch import open_parallel_engine  # noqa: E402


def pytest_addoption(parser):
    parser.addoption(
        "--run-gpu", action="store_true", default=False,
        help="Run tests that require a CUDA device",
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "gpu: requires a CUDA device and CuPy")


def pytest_collection_modifyitems(config, items):
    if not config.getoption("--run-gpu"):
        skip_gpu = pytest.mark.skip(reason="needs --run-gpu option to run")
        for item in items:
            if "gpu" in item.keywords:
                item.add_marker(skip_gpu)


@pytest.fixture(params=["tiles", pytest.param("cuda", marks=pytest.mark.gpu)])
def parallel_engine(request):
    """Every parallel backend, initialized; small tiles so images span several."""
    cfg = {"parallel": {"backend": request.param, "tile_size": 3, "workers": 4}}
    with open_parallel_engine(cfg) as engine:
        yield engine


@pytest.fixture
def tiles_cfg(tmp_path):
    return {
        "parallel": {"backend": "tiles", "tile_size": 8, "workers": 2},
        "compare": {"max_report": 5},
        "outputs": {
            "root": str(tmp_path / "outputs"),
            "edges_png": str(tmp_path / "outputs" / "edges.png"),
            "parallel_edges_png": str(tmp_path / "outputs" / "edges_parallel.png"),
            "save_both": True,
            "png_compression": 9,
            "report_txt": str(tmp_path / "outputs" / "report.txt"),
        },
        "display": {"enabled": False},
    }
