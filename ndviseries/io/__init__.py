"""
ndviseries I/O Module

Scene (raster) and region (vector) loading.
"""

from ndviseries.io.regions import Region, load_regions, regions_from_frame
from ndviseries.io.scene import (
    Scene,
    SceneReader,
    find_scenes,
    load_scene,
    parse_date_from_filename,
)

__all__ = [
    "Region",
    "Scene",
    "SceneReader",
    "find_scenes",
    "load_regions",
    "load_scene",
    "parse_date_from_filename",
    "regions_from_frame",
]
