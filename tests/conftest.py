"""
ndviseries Test Configuration

Shared pytest fixtures for all tests.
"""

import numpy as np
import pytest
import rasterio
from rasterio.transform import from_origin
from shapely.geometry import box

from ndviseries.io.regions import Region

TEST_CRS = "EPSG:32611"
BAND_ORDER = ["blue", "green", "red", "nir", "swir_1", "swir_2"]


def write_scene(path, nir, red, transform=None, nodata=None, count=6, dtype="float32"):
    """Write a Landsat-OLI-layout GeoTIFF with the given NIR and red bands."""
    nir = np.asarray(nir, dtype=dtype)
    red = np.asarray(red, dtype=dtype)
    height, width = nir.shape
    if transform is None:
        transform = from_origin(0.0, float(height), 1.0, 1.0)

    fill = np.full((height, width), 0.1, dtype=dtype)
    layers = {"red": red, "nir": nir}

    with rasterio.open(
        path,
        "w",
        driver="GTiff",
        height=height,
        width=width,
        count=count,
        dtype=dtype,
        crs=TEST_CRS,
        transform=transform,
        nodata=nodata,
    ) as dst:
        for i, name in enumerate(BAND_ORDER[:count], 1):
            dst.write(layers.get(name, fill), i)
    return str(path)


@pytest.fixture
def make_scene(tmp_path):
    """Factory writing synthetic scenes into tmp_path."""

    def _make(filename, nir, red, **kwargs):
        return write_scene(tmp_path / filename, nir, red, **kwargs)

    return _make


@pytest.fixture
def scene_a(make_scene):
    """2x2 scene with NIR 0.5 and red 0.1 everywhere"""
    return make_scene(
        "LC08_20180612.tif",
        nir=[[0.5, 0.5], [0.5, 0.5]],
        red=[[0.1, 0.1], [0.1, 0.1]],
    )


@pytest.fixture
def scene_b(make_scene):
    """2x2 scene with NIR = red = 0 everywhere"""
    return make_scene(
        "LC08_20190701.tif",
        nir=[[0.0, 0.0], [0.0, 0.0]],
        red=[[0.0, 0.0], [0.0, 0.0]],
    )


@pytest.fixture
def full_region():
    """Region covering all pixels of a 2x2 scene at the origin"""
    return Region(region_id="S1", label="riparian forest", geometry=box(0, 0, 2, 2), crs=TEST_CRS)
