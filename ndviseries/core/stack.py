"""
NDVI layer stacking

Derives one NDVI layer per scene and assembles the layers into an ordered,
date-labeled stack. Layer order is always input order.
"""

import logging
from collections.abc import Iterable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

import numpy as np
import xarray as xr
from numpy.typing import NDArray

import ndviseries.core.bandmath  # noqa: F401  (registers DataArray.bandmath)
from ndviseries.core.exceptions import LabelConflictError, ShapeMismatchError
from ndviseries.io.scene import Scene, load_scene
from ndviseries.products.profile import DEFAULT_SENSOR, SensorProfile

logger = logging.getLogger(__name__)

LABEL_DATE_FORMAT = "%Y%m%d"


@dataclass(frozen=True, eq=False)
class NdviLayer:
    """
    Single-band NDVI raster derived from one scene.

    Attributes:
        label: Unique layer label (defaults to the date as YYYYMMDD)
        acquired: Acquisition date of the source scene
        values: 2-D float64 NDVI values, NaN where undefined
        transform: Affine pixel-to-coordinate transform
        crs: Coordinate reference system
        source: Originating file path
    """

    label: str
    acquired: date
    values: NDArray
    transform: Any
    crs: Any = None
    source: str | None = None

    @property
    def shape(self) -> tuple[int, int]:
        return self.values.shape


def ndvi_layer(scene: Scene, label: str | None = None) -> NdviLayer:
    """Apply NDVI to a scene's (nir, red) pair."""
    values = scene.data.bandmath.ndvi().values
    values.setflags(write=False)
    return NdviLayer(
        label=label or scene.acquired.strftime(LABEL_DATE_FORMAT),
        acquired=scene.acquired,
        values=values,
        transform=scene.transform,
        crs=scene.crs,
        source=scene.path,
    )


class LayerStack:
    """
    Ordered collection of NDVI layers sharing one grid shape.

    Build with ``build_stack`` or ``stack_from_files``; the constructor
    enforces unique labels and a common shape.

    Examples:
        >>> stack = stack_from_files(["LC08_20180612.tif", "LC08_20190701.tif"])
        >>> stack.labels
        ['20180612', '20190701']
        >>> stack["20180612"].values.shape
        (120, 140)
    """

    def __init__(self, layers: Iterable[NdviLayer]):
        layers = tuple(layers)
        if not layers:
            raise ValueError("LayerStack needs at least one layer")

        seen: dict[str, NdviLayer] = {}
        for layer in layers:
            if layer.label in seen:
                raise LabelConflictError(
                    f"Duplicate layer label {layer.label!r} "
                    f"({seen[layer.label].source} and {layer.source})"
                )
            seen[layer.label] = layer

        expected = layers[0].shape
        for layer in layers[1:]:
            if layer.shape != expected:
                raise ShapeMismatchError(
                    f"Layer {layer.label!r} from {layer.source} has shape {layer.shape}, "
                    f"expected {expected} (from {layers[0].source})"
                )

        self._layers = layers
        self._by_label = seen

    @property
    def labels(self) -> list[str]:
        return [layer.label for layer in self._layers]

    @property
    def dates(self) -> list[date]:
        return [layer.acquired for layer in self._layers]

    @property
    def shape(self) -> tuple[int, int]:
        return self._layers[0].shape

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[NdviLayer]:
        return iter(self._layers)

    def __getitem__(self, key: int | str) -> NdviLayer:
        if isinstance(key, str):
            return self._by_label[key]
        return self._layers[key]

    def sorted_by_date(self) -> "LayerStack":
        """Return a new stack ordered by acquisition date (stable)."""
        return LayerStack(sorted(self._layers, key=lambda layer: layer.acquired))

    def to_xarray(self) -> xr.DataArray:
        """
        Convert to a (layer, y, x) DataArray.

        The ``layer`` coordinate holds the labels and ``date`` the
        acquisition dates. The first layer's transform and CRS are kept in
        attrs.
        """
        data = np.stack([layer.values for layer in self._layers])
        return xr.DataArray(
            data,
            dims=["layer", "y", "x"],
            coords={
                "layer": self.labels,
                "date": ("layer", np.array(self.dates, dtype="datetime64[D]")),
            },
            name="ndvi",
            attrs={"transform": self._layers[0].transform, "crs": self._layers[0].crs},
        )

    def __repr__(self) -> str:
        return (
            f"<LayerStack: {len(self)} layers, {self.shape[0]} x {self.shape[1]}>\n"
            f"  Labels: [{', '.join(self.labels)}]"
        )


def build_stack(scenes: Sequence[Scene], labels: Sequence[str] | None = None) -> LayerStack:
    """
    Derive an NDVI layer per scene and stack them in input order.

    Args:
        scenes: Scenes in the desired layer order
        labels: Optional labels, one per scene; defaults to YYYYMMDD dates

    Raises:
        LabelConflictError: If two layers end up with the same label
        ShapeMismatchError: If a layer's grid shape differs from the first
    """
    scenes = list(scenes)
    if labels is not None and len(labels) != len(scenes):
        raise ValueError(f"Got {len(labels)} labels for {len(scenes)} scenes")
    if labels is None:
        labels = [None] * len(scenes)

    layers = [ndvi_layer(scene, label) for scene, label in zip(scenes, labels)]
    stack = LayerStack(layers)
    logger.info("Built NDVI stack of %d layers", len(stack))
    return stack


def stack_from_files(
    paths: Sequence[str | Path],
    sensor: str | SensorProfile = DEFAULT_SENSOR,
    date_pattern: str | None = None,
    max_workers: int = 1,
) -> LayerStack:
    """
    Load scenes and build the NDVI stack.

    Args:
        paths: Scene files in the desired layer order
        sensor: Sensor profile id or profile
        date_pattern: Custom regex for file-name dates
        max_workers: Threads used for load+NDVI; 1 = sequential

    Returns:
        LayerStack with one layer per path, in path order
    """
    paths = list(paths)
    if not paths:
        raise ValueError("No scene files given")

    def _load(path):
        scene = load_scene(path, sensor=sensor, date_pattern=date_pattern)
        return ndvi_layer(scene)

    if max_workers > 1 and len(paths) > 1:
        logger.debug("Loading %d scenes with %d workers", len(paths), max_workers)
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            layers = list(executor.map(_load, paths))
    else:
        layers = [_load(path) for path in paths]

    stack = LayerStack(layers)
    logger.info("Built NDVI stack of %d layers from files", len(stack))
    return stack
