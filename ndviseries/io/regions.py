"""
Region (study site) loading

Reads labeled polygon regions from any vector format geopandas can open
(Shapefile, GeoJSON, GeoPackage, ...).
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import geopandas as gpd
from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry

from ndviseries.core.exceptions import LoadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Region:
    """
    A named study site.

    Attributes:
        region_id: Unique site identifier
        label: Vegetation community (e.g. "riparian forest")
        geometry: Polygon or MultiPolygon
        crs: CRS of the geometry, if known
    """

    region_id: str
    label: str
    geometry: BaseGeometry
    crs: Any = None

    def __repr__(self) -> str:
        return f"<Region {self.region_id}: {self.label} ({self.geometry.geom_type})>"


def regions_from_frame(
    gdf: gpd.GeoDataFrame,
    id_field: str = "site_id",
    label_field: str = "label",
    source: str = "<GeoDataFrame>",
) -> list[Region]:
    """
    Convert a GeoDataFrame into Regions, preserving row order.

    Raises:
        LoadError: On missing fields, duplicate ids or non-polygon geometry
    """
    missing = [f for f in (id_field, label_field) if f not in gdf.columns]
    if missing:
        raise LoadError(f"{source}: missing field(s) {', '.join(missing)}")

    ids = gdf[id_field].astype(str)
    duplicated = sorted(set(ids[ids.duplicated()]))
    if duplicated:
        raise LoadError(f"{source}: duplicate region id(s) {', '.join(duplicated)}")

    regions = []
    for region_id, label, geom in zip(ids, gdf[label_field], gdf.geometry):
        if not isinstance(geom, (Polygon, MultiPolygon)):
            kind = "empty" if geom is None else geom.geom_type
            raise LoadError(f"{source}: region {region_id} has {kind} geometry, expected polygon")
        regions.append(Region(region_id=region_id, label=str(label), geometry=geom, crs=gdf.crs))

    logger.debug("Loaded %d regions from %s", len(regions), source)
    return regions


def load_regions(
    path: str | Path,
    id_field: str = "site_id",
    label_field: str = "label",
) -> list[Region]:
    """
    Load labeled polygon regions from a vector file.

    Args:
        path: Vector file (Shapefile, GeoJSON, ...)
        id_field: Attribute holding the unique site identifier
        label_field: Attribute holding the vegetation-community label

    Returns:
        Regions in file order

    Raises:
        LoadError: If the file cannot be read or its features are invalid

    Examples:
        >>> regions = load_regions("sites.shp", id_field="Site", label_field="Veg")
        >>> regions[0].label
        'riparian forest'
    """
    if not Path(path).exists():
        raise LoadError(f"Vector file not found: {path}")
    try:
        gdf = gpd.read_file(path)
    except Exception as e:
        raise LoadError(f"Cannot read vector file {path}: {e}") from e
    return regions_from_frame(gdf, id_field, label_field, source=str(path))
