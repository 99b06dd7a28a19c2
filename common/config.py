import json
from pathlib import Path
from typing import Any, Dict, Mapping

_ROOT = Path(__file__).resolve().parents[1]

DEFAULT_CONFIG_PATH = _ROOT / "configs" / "default.json"
LOCAL_CONFIG_PATH = Path("configs/local.json")


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base without mutating inputs."""
    merged = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(merged.get(k), dict):
            merged[k] = _deep_merge(merged[k], v)
        else:
            merged[k] = v
    return merged


def load_config(
    default_path: Path | str = DEFAULT_CONFIG_PATH,
    local_path: Path | str | None = LOCAL_CONFIG_PATH,
) -> Dict[str, Any]:
    """
    Load default config and optionally merge local overrides.
    """
    default_path = Path(default_path)

    with default_path.open("r", encoding="utf-8") as f:
        base_cfg = json.load(f)

    if local_path is not None and Path(local_path).exists():
        with Path(local_path).open("r", encoding="utf-8") as f:
            local_cfg = json.load(f)
        return _deep_merge(base_cfg, local_cfg)

    return base_cfg


def apply_overrides(cfg: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of cfg with dotted keys set, e.g. {"parallel.backend": "tiles"}.
    None values are skipped.
    """
    nested: Dict[str, Any] = {}
    for dotted, value in overrides.items():
        if value is None:
            continue
        node = nested
        *parents, leaf = dotted.split(".")
        for p in parents:
            node = node.setdefault(p, {})
        node[leaf] = value
    return _deep_merge(cfg, nested)


def get_section(cfg: Mapping[str, Any], name: str) -> Dict[str, Any]:
    section = cfg.get(name, {})
    if not isinstance(section, dict):
        raise ValueError(f"config section '{name}' must be an object, got {type(section).__name__}")
    return section


def ensure_output_dirs(cfg: Dict[str, Any]) -> None:
    """
    Create output directories referenced by the config if they do not exist.
    """
    outputs = cfg.get("outputs", {})
    paths = [outputs.get("root")]
    for key in ("edges_png", "parallel_edges_png", "report_txt"):
        if outputs.get(key):
            paths.append(Path(outputs[key]).parent)
    for p in paths:
        if not p:
            continue
        Path(p).mkdir(parents=True, exist_ok=True)
