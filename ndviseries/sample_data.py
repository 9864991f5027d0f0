"""
Sample data generator for ndviseries tutorials.

Creates small synthetic Landsat 8 OLI scenes and a matching set of study
regions for quick-start demonstrations.
"""

import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

SAMPLE_REGIONS_FILE = "regions.geojson"

# Sample scene parameters; reflectance per band for the (riparian, grassland) halves
_SAMPLE_SCENES: list[dict[str, Any]] = [
    {
        "filename": "LC08_L2SP_042036_20180115_20200902_02_T1.tif",
        "season": "winter",
        "band_scales": {
            "blue": (0.05, 0.06),
            "green": (0.07, 0.08),
            "red": (0.08, 0.10),
            "nir": (0.22, 0.16),
            "swir_1": (0.18, 0.24),
            "swir_2": (0.12, 0.18),
        },
    },
    {
        "filename": "LC08_L2SP_042036_20180612_20200831_02_T1.tif",
        "season": "summer",
        "band_scales": {
            "blue": (0.03, 0.07),
            "green": (0.06, 0.10),
            "red": (0.03, 0.14),
            "nir": (0.38, 0.22),
            "swir_1": (0.15, 0.30),
            "swir_2": (0.08, 0.24),
        },
    },
    {
        "filename": "LC08_L2SP_042036_20181019_20200830_02_T1.tif",
        "season": "autumn",
        "band_scales": {
            "blue": (0.04, 0.07),
            "green": (0.06, 0.09),
            "red": (0.05, 0.12),
            "nir": (0.30, 0.18),
            "swir_1": (0.17, 0.28),
            "swir_2": (0.10, 0.21),
        },
    },
]

_SAMPLE_REGIONS: list[dict[str, Any]] = [
    {"site_id": "RIP01", "label": "riparian forest", "cols": (4, 16)},
    {"site_id": "GRS01", "label": "grassland", "cols": (24, 36)},
]


def create_sample_data(output_dir: str | None = None) -> str:
    """
    Create sample scenes and regions for the quick-start tutorial.

    Generates 3 synthetic six-band (Landsat 8 OLI bands 2-7) GeoTIFFs of
    40x40 pixels at 30m in UTM 11N, plus ``regions.geojson`` with a riparian
    site over the left half of the grid and a grassland site over the right.

    Args:
        output_dir: Directory to write into. If None, uses a temp directory.

    Returns:
        Path to the directory containing the sample files.

    Examples:
        >>> from ndviseries.sample_data import create_sample_data
        >>> import os
        >>> sample_dir = create_sample_data()
        >>> sorted(os.listdir(sample_dir))[:1]
        ['LC08_L2SP_042036_20180115_20200902_02_T1.tif']
    """
    import geopandas as gpd
    import numpy as np
    import rasterio
    from rasterio.crs import CRS
    from rasterio.transform import from_origin
    from shapely.geometry import box

    from ndviseries.products.profile import BUILTIN_PROFILES

    if output_dir is None:
        import tempfile

        output_dir = tempfile.mkdtemp(prefix="ndviseries_sample_")

    out_path = Path(output_dir)
    out_path.mkdir(parents=True, exist_ok=True)

    # Sample area: 1.2km x 1.2km in UTM 11N (southern California)
    west, north = 500000.0, 3800000.0
    pixel_size = 30.0
    width, height = 40, 40
    transform = from_origin(west, north, pixel_size, pixel_size)
    crs = CRS.from_epsg(32611)

    band_names = BUILTIN_PROFILES["landsat8_oli"].band_names
    rng = np.random.default_rng(42)  # Reproducible

    for scene in _SAMPLE_SCENES:
        filepath: Path = out_path / scene["filename"]

        bands = []
        for band_name in band_names:
            left, right = scene["band_scales"][band_name]
            base = np.empty((height, width), dtype=np.float64)
            base[:, : width // 2] = left
            base[:, width // 2 :] = right
            noise = rng.normal(0, 0.005, (height, width))
            bands.append(np.clip(base + noise, 0.0, 1.0).astype(np.float32))

        profile = {
            "driver": "GTiff",
            "dtype": "float32",
            "width": width,
            "height": height,
            "count": len(band_names),
            "crs": crs,
            "transform": transform,
            "nodata": np.nan,
        }

        with rasterio.open(str(filepath), "w", **profile) as dst:
            for i, band_data in enumerate(bands, 1):
                dst.write(band_data, i)
                dst.set_band_description(i, band_names[i - 1])

        logger.debug("Created sample scene: %s", filepath)

    geometries = []
    for region in _SAMPLE_REGIONS:
        col_start, col_stop = region["cols"]
        geometries.append(
            box(
                west + col_start * pixel_size,
                north - 36 * pixel_size,
                west + col_stop * pixel_size,
                north - 4 * pixel_size,
            )
        )
    regions = gpd.GeoDataFrame(
        {
            "site_id": [r["site_id"] for r in _SAMPLE_REGIONS],
            "label": [r["label"] for r in _SAMPLE_REGIONS],
        },
        geometry=geometries,
        crs="EPSG:32611",
    )
    regions.to_file(out_path / SAMPLE_REGIONS_FILE, driver="GeoJSON")

    logger.info("Created %d sample scenes in %s", len(_SAMPLE_SCENES), output_dir)
    return str(out_path)
