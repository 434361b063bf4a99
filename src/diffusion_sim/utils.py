# src/diffusion_sim/utils.py
from __future__ import annotations

import json
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover
    tomllib = None  # type: ignore

_ARRAY_FIELDS = ("bin_centers", "counts", "normalized", "analytical", "positions")


@dataclass
class ProfileResult:
    """Common container for diffusion run outputs."""

    bin_centers: Optional[np.ndarray] = None
    counts: Optional[np.ndarray] = None
    normalized: Optional[np.ndarray] = None
    analytical: Optional[np.ndarray] = None
    positions: Optional[np.ndarray] = None
    meta: Optional[Dict[str, Any]] = None

    def ensure_meta(self) -> Dict[str, Any]:
        if self.meta is None:
            self.meta = {}
        return self.meta


def now_str() -> str:
    return time.strftime("%Y%m%d-%H%M%S")


def save_profile_result(
    path: str | os.PathLike[str], result: ProfileResult, *, overwrite: bool = True
) -> None:
    """Serialize a ProfileResult to a compressed .npz file."""
    out_dir = Path(path).parent
    out_dir.mkdir(parents=True, exist_ok=True)
    out: Dict[str, Any] = {}
    for name in _ARRAY_FIELDS:
        value = getattr(result, name)
        if value is not None:
            out[name] = np.asarray(value)

    # Arrays in meta go to the top level so they load without pickling
    meta = result.meta or {}
    meta_clean = {}
    for key, value in meta.items():
        if isinstance(value, np.ndarray):
            out[key] = value
        else:
            meta_clean[key] = value
    out["meta"] = meta_clean

    if not overwrite and Path(path).exists():
        raise FileExistsError(f"{path} already exists")
    np.savez_compressed(path, **out)


def load_profile_result(path: str | os.PathLike[str]) -> ProfileResult:
    """Load a .npz written by :func:`save_profile_result`."""
    with np.load(path, allow_pickle=True) as data:
        fields = {
            name: np.asarray(data[name]) for name in _ARRAY_FIELDS if name in data
        }
        meta: Dict[str, Any] = {}
        if "meta" in data:
            try:
                meta = dict(data["meta"].item())
            except (ValueError, AttributeError):
                meta = {}
        for key in data.files:
            if key not in _ARRAY_FIELDS and key != "meta" and key not in meta:
                meta[key] = data[key]
    return ProfileResult(meta=meta, **fields)


def load_params(path: str | os.PathLike[str]) -> Dict[str, Any]:
    """
    Load simulation parameters from JSON or TOML.
    """
    path = str(path)
    with open(path, "rb") as fh:
        data = fh.read()
    suffix = Path(path).suffix.lower()
    if suffix in {".json", ""}:
        return json.loads(data.decode("utf-8"))
    if suffix in {".toml", ".tml"}:
        if tomllib is None:
            raise RuntimeError("tomllib is unavailable; cannot parse TOML files")
        return tomllib.loads(data.decode("utf-8"))
    raise ValueError(f"Unsupported parameter file format: {suffix}")
