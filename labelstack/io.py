"""Adapters between raw arrays or files and LabeledArray.

- from_raw: turn an importer's raw buffer and per-axis sizes into a
  LabeledArray, stripping singleton axes from the label list
- load_npy / save_npy: .npy persistence with a JSON sidecar holding the
  labels, tag and voxel size
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

import dask.array as da
import numpy as np

from .core import LabeledArray
from .logging import get_logger
from .permutation import LabelLike, check_unique, normalize_label, normalize_labels
from .reshape import squeeze_labels

logger = get_logger(__name__)

SIDECAR_SUFFIX = ".labels.json"


def from_raw(
    raw: Any,
    axis_sizes: Dict[LabelLike, int],
    axis_order: Iterable[LabelLike] = "xyczt",
    voxel_size: Optional[Dict[LabelLike, float]] = None,
    tag: str = "",
) -> LabeledArray:
    """
    Build a LabeledArray from a raw image buffer and its axis sizes.

    The buffer is reshaped (C order) to the sizes in `axis_order`. Axes of
    size 1 are then removed together with their labels, since absent labels
    already mean size 1.

    Args:
        raw: Raw pixel data with prod(axis_sizes) elements
        axis_sizes: Size per label, e.g. {'x': 512, 'y': 512, 'c': 2}.
            Labels that are not given have size 1
        axis_order: Order of the axes in the raw buffer
        voxel_size: Physical size per label
        tag: Name of the image

    Returns:
        LabeledArray without singleton axes

    Raises:
        ValueError: If a size label is not in axis_order or the element
            count does not match
    """
    order = normalize_labels(axis_order)
    check_unique(order)

    sizes = {normalize_label(label): int(size) for label, size in axis_sizes.items()}
    unknown = [str(label) for label in sizes if label not in order]
    if unknown:
        raise ValueError(
            f"Axis size(s) given for {', '.join(unknown)}, which are not in the axis order"
        )
    shape = tuple(sizes.get(label, 1) for label in order)

    if not isinstance(raw, da.Array):
        raw = np.asarray(raw)
    if raw.size != int(np.prod(shape)):
        raise ValueError(
            f"Raw data has {raw.size} elements, expected {int(np.prod(shape))} "
            f"for sizes {dict(zip(map(str, order), shape))}"
        )

    data, labels = squeeze_labels(raw.reshape(shape), order, shape)
    logger.debug("Imported raw data as %s with shape %s", labels, data.shape)
    return LabeledArray(data, labels, tag=tag, voxel_size=voxel_size)


def _sidecar_path(path: Union[str, Path]) -> Path:
    return Path(str(path) + SIDECAR_SUFFIX)


def save_npy(stack: LabeledArray, path: Union[str, Path]) -> Path:
    """
    Save a LabeledArray as .npy plus a label sidecar.

    Args:
        stack: Array to save (dask data is computed)
        path: Output .npy path

    Returns:
        Path of the written .npy file
    """
    path = Path(path)
    if path.suffix != ".npy":
        path = path.with_name(path.name + ".npy")

    np.save(path, np.asarray(stack.data))
    sidecar = {
        "labels": stack.dims,
        "tag": stack.tag,
        "voxel_size": stack.voxel_size,
    }
    _sidecar_path(path).write_text(json.dumps(sidecar, indent=2))
    return path


def load_npy(
    path: Union[str, Path], labels: Optional[Iterable[LabelLike]] = None
) -> LabeledArray:
    """
    Load a .npy file as LabeledArray.

    Args:
        path: Input .npy path
        labels: Labels of the axes. If None, they are read from the
            sidecar written by save_npy

    Raises:
        ValueError: If no labels are given and no sidecar exists
    """
    path = Path(path)
    data = np.load(path)

    sidecar = _sidecar_path(path)
    meta: Dict[str, Any] = {}
    if sidecar.exists():
        meta = json.loads(sidecar.read_text())

    if labels is None:
        if "labels" not in meta:
            raise ValueError(
                f"No labels given and no label sidecar found at {sidecar}"
            )
        labels = meta["labels"]

    return LabeledArray(
        data,
        labels,
        tag=meta.get("tag", path.stem),
        voxel_size=meta.get("voxel_size"),
    )
