"""
Zonal aggregation of NDVI layers over study regions.

Each region is rasterized against each layer's transform with
``rasterio.features.geometry_mask``. By default a pixel belongs to a region
when its center falls inside the polygon; ``all_touched=True`` selects every
pixel the polygon touches instead.
"""

import logging
from collections.abc import Callable, Sequence

import geopandas as gpd
import numpy as np
import pandas as pd
from numpy.typing import NDArray
from rasterio.features import geometry_mask
from shapely.geometry import mapping

from ndviseries.core.exceptions import LoadError
from ndviseries.core.stack import LayerStack, NdviLayer
from ndviseries.io.regions import Region

logger = logging.getLogger(__name__)

REGION_COLUMN = "region"
LABEL_COLUMN = "label"


def _project(region: Region, crs):
    """Region geometry in the layer's CRS."""
    if region.crs is None or crs is None or region.crs == crs:
        return region.geometry
    return gpd.GeoSeries([region.geometry], crs=region.crs).to_crs(crs).iloc[0]


def region_mask(region: Region, layer: NdviLayer, all_touched: bool = False) -> NDArray:
    """
    Boolean mask of the layer pixels inside a region (True = inside).

    A region that misses the layer entirely gives an all-False mask.
    """
    geom = _project(region, layer.crs)
    if geom.is_empty:
        return np.zeros(layer.shape, dtype=bool)
    return geometry_mask(
        [mapping(geom)],
        out_shape=layer.shape,
        transform=layer.transform,
        all_touched=all_touched,
        invert=True,
    )


def _valid_pixels(layer: NdviLayer, mask: NDArray) -> NDArray:
    values = layer.values[mask]
    return values[~np.isnan(values)]


def _mean(pixels: NDArray) -> float:
    if pixels.size == 0:
        return np.nan
    return float(pixels.mean())


def _check_unique_ids(regions: Sequence[Region]) -> None:
    seen = set()
    duplicated = []
    for region in regions:
        if region.region_id in seen and region.region_id not in duplicated:
            duplicated.append(region.region_id)
        seen.add(region.region_id)
    if duplicated:
        raise LoadError(f"Duplicate region id(s) {', '.join(map(str, duplicated))}")


def _aggregate(
    stack: LayerStack,
    regions: Sequence[Region],
    reducer: Callable[[NDArray], float],
    all_touched: bool,
) -> pd.DataFrame:
    _check_unique_ids(regions)

    rows = []
    for region in regions:
        row = {REGION_COLUMN: region.region_id, LABEL_COLUMN: region.label}
        masks: dict[tuple, NDArray] = {}
        for layer in stack:
            key = (layer.transform, str(layer.crs))
            if key not in masks:
                masks[key] = region_mask(region, layer, all_touched=all_touched)
            row[layer.label] = reducer(_valid_pixels(layer, masks[key]))
        rows.append(row)

    return pd.DataFrame(rows, columns=[REGION_COLUMN, LABEL_COLUMN, *stack.labels])


def zonal_means(
    stack: LayerStack,
    regions: Sequence[Region],
    all_touched: bool = False,
) -> pd.DataFrame:
    """
    Mean NDVI of every layer within every region.

    NaN pixels are excluded from both sum and count. A region with no valid
    pixels in a layer gets NaN for that layer, never 0.

    Args:
        stack: NDVI layer stack
        regions: Regions, one output row each, in order
        all_touched: Include every touched pixel instead of center-in-polygon

    Returns:
        Wide DataFrame: region, label, then one column per layer label

    Raises:
        LoadError: If two regions share an id

    Examples:
        >>> wide = zonal_means(stack, regions)
        >>> list(wide.columns)
        ['region', 'label', '20180612', '20190701']
    """
    wide = _aggregate(stack, regions, _mean, all_touched)

    for layer_label in stack.labels:
        empty = wide.loc[wide[layer_label].isna(), REGION_COLUMN].tolist()
        if empty:
            logger.warning(
                "Layer %s: no valid pixels in region(s) %s",
                layer_label,
                ", ".join(map(str, empty)),
            )
    logger.info("Aggregated %d layers over %d regions", len(stack), len(regions))
    return wide


def count_valid_pixels(
    stack: LayerStack,
    regions: Sequence[Region],
    all_touched: bool = False,
) -> pd.DataFrame:
    """
    Number of valid (non-NaN) pixels behind each zonal mean.

    Same layout as ``zonal_means``; a 0 cell marks an undefined mean.
    """
    counts = _aggregate(stack, regions, lambda pixels: pixels.size, all_touched)
    return counts.astype({label: "int64" for label in stack.labels})
