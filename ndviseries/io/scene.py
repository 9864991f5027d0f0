"""
Scene loading using Rasterio

Opens one multi-band raster per acquisition and labels its layers with the
standard band names of a sensor profile.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any

import numpy as np
import rasterio
import xarray as xr
from numpy.typing import NDArray
from rasterio.errors import RasterioError

from ndviseries.core.exceptions import DateParseError, LoadError
from ndviseries.products.profile import DEFAULT_SENSOR, SensorProfile, get_sensor

logger = logging.getLogger(__name__)

# Date parsing patterns (tried in order)
_DATE_PATTERNS = [
    (r"(?<!\d)(\d{8})(?!\d)", "%Y%m%d"),  # 20180612
    (r"(\d{4}-\d{2}-\d{2})", "%Y-%m-%d"),  # 2018-06-12
    (r"(\d{4}_\d{2}_\d{2})", "%Y_%m_%d"),  # 2018_06_12
]


def parse_date_from_filename(filename: str, date_pattern: str | None = None) -> date:
    """
    Extract acquisition date from a file name.

    Tries a custom regex first (if given), then YYYYMMDD, YYYY-MM-DD and
    YYYY_MM_DD. Landsat product ids carry the acquisition date before the
    processing date, so the first match wins.

    Raises:
        DateParseError: If no pattern yields a valid calendar date
    """
    name = Path(filename).name
    if date_pattern:
        m = re.search(date_pattern, name)
        if m:
            date_str = m.group(1) if m.lastindex else m.group(0)
            for fmt in ("%Y%m%d", "%Y-%m-%d", "%Y_%m_%d", "%Y.%m.%d", "%Y/%m/%d"):
                try:
                    return datetime.strptime(date_str, fmt).date()
                except ValueError:
                    continue
        raise DateParseError(f"Pattern {date_pattern!r} found no date in file name: {name}")

    for pattern, fmt in _DATE_PATTERNS:
        for m in re.finditer(pattern, name):
            try:
                return datetime.strptime(m.group(1), fmt).date()
            except ValueError:
                continue

    raise DateParseError(f"No acquisition date in file name: {name}")


def find_scenes(directory: str | Path, glob_pattern: str = "*.tif") -> list[Path]:
    """
    List scene files in a directory, sorted by file name.

    Raises:
        LoadError: If the path is not a directory or holds no matching files
    """
    dir_path = Path(directory)
    if not dir_path.is_dir():
        raise LoadError(f"Not a directory: {directory}")

    paths = sorted(p for p in dir_path.glob(glob_pattern) if p.is_file())
    if not paths:
        raise LoadError(f"No files matching {glob_pattern!r} in {directory}")
    logger.debug("Found %d scenes in %s", len(paths), directory)
    return paths


@dataclass(frozen=True, eq=False)
class Scene:
    """
    One satellite acquisition.

    Attributes:
        path: Source file path
        acquired: Acquisition date
        sensor: Sensor profile id the bands were named with
        data: Reflectance cube with dims (band, y, x); no-data pixels are NaN
        transform: Affine pixel-to-coordinate transform
        crs: Coordinate reference system (may be None)
    """

    path: str
    acquired: date
    sensor: str
    data: xr.DataArray
    transform: Any
    crs: Any = None

    @property
    def band_names(self) -> list[str]:
        return [str(b) for b in self.data.coords["band"].values]

    @property
    def shape(self) -> tuple[int, int]:
        return (self.data.sizes["y"], self.data.sizes["x"])

    def band(self, name: str) -> NDArray:
        """Return one band as a 2-D float64 array."""
        if name not in self.band_names:
            raise KeyError(f"Band {name!r} not in scene {self.path} ({', '.join(self.band_names)})")
        return self.data.sel(band=name).values

    def __repr__(self) -> str:
        return (
            f"<Scene: {Path(self.path).name}>\n"
            f"  Date: {self.acquired.isoformat()}\n"
            f"  Sensor: {self.sensor}\n"
            f"  Size: {self.shape[1]} x {self.shape[0]}, {len(self.band_names)} bands"
        )


class SceneReader:
    """
    Multi-band raster reader using Rasterio

    Attributes:
        file_path: Path to the raster file
        dataset: Rasterio dataset handle

    Examples:
        >>> with SceneReader("LC08_20180612.tif") as reader:
        ...     meta = reader.get_metadata()
        ...     red = reader.read_band(3)
    """

    def __init__(self, file_path: str | Path):
        """
        Open raster file with Rasterio

        Raises:
            LoadError: If the file is missing or not a readable raster
        """
        self.file_path = str(file_path)
        self.dataset = None
        if not Path(file_path).is_file():
            raise LoadError(f"Raster not found: {file_path}")
        try:
            self.dataset = rasterio.open(file_path, "r")
        except RasterioError as e:
            raise LoadError(f"Cannot open raster {file_path}: {e}") from e

    def read_band(self, band_index: int, nodata: float | None = None) -> NDArray:
        """
        Read single band as float64, with no-data pixels set to NaN

        Args:
            band_index: Band index (1-based, following GDAL convention)
            nodata: No-data value overriding the file's own
        """
        try:
            data = self.dataset.read(band_index, masked=True)
        except (RasterioError, IndexError) as e:
            raise LoadError(f"Cannot read band {band_index} of {self.file_path}: {e}") from e

        values = data.astype(np.float64).filled(np.nan)
        if nodata is not None:
            values[data.data == nodata] = np.nan
        return values

    def get_metadata(self) -> dict[str, Any]:
        """
        Extract metadata

        Returns:
            Dictionary with crs, transform, bounds, width, height, count,
            dtype and nodata
        """
        return {
            "crs": self.dataset.crs,
            "transform": self.dataset.transform,
            "bounds": self.dataset.bounds,
            "width": self.dataset.width,
            "height": self.dataset.height,
            "count": self.dataset.count,
            "dtype": self.dataset.dtypes[0],
            "nodata": self.dataset.nodata,
        }

    def close(self):
        if self.dataset is not None:
            self.dataset.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        if self.dataset is None or self.dataset.closed:
            return f"<SceneReader (closed): {self.file_path}>"
        return (
            f"<SceneReader: {self.file_path}>\n"
            f"  Size: {self.dataset.width} x {self.dataset.height}\n"
            f"  Bands: {self.dataset.count}\n"
            f"  CRS: {self.dataset.crs}"
        )


def load_scene(
    path: str | Path,
    sensor: str | SensorProfile = DEFAULT_SENSOR,
    acquired: date | None = None,
    date_pattern: str | None = None,
) -> Scene:
    """
    Load one scene, naming its bands from a sensor profile.

    Args:
        path: Multi-band raster file
        sensor: Sensor profile id or profile
        acquired: Acquisition date; parsed from the file name when None
        date_pattern: Custom regex for the file-name date

    Returns:
        Scene with float64 reflectance and NaN for no-data

    Raises:
        LoadError: If the file is unreadable or its band count differs
            from the profile's
        DateParseError: If no date is given and none is in the file name

    Examples:
        >>> scene = load_scene("LC08_L2SP_042036_20180612_20200831_02_T1.tif")
        >>> scene.acquired
        datetime.date(2018, 6, 12)
        >>> scene.band_names
        ['blue', 'green', 'red', 'nir', 'swir_1', 'swir_2']
    """
    profile = get_sensor(sensor)

    with SceneReader(path) as reader:
        meta = reader.get_metadata()
        if meta["count"] != profile.band_count:
            raise LoadError(
                f"{path}: expected {profile.band_count} bands for sensor "
                f"{profile.sensor_id!r}, found {meta['count']}"
            )
        if acquired is None:
            acquired = parse_date_from_filename(str(path), date_pattern)
        bands = [
            reader.read_band(profile.bands[name], nodata=profile.nodata)
            for name in profile.band_names
        ]

    cube = np.stack(bands)
    if profile.scale_factor != 1.0 or profile.offset != 0.0:
        cube = cube * profile.scale_factor + profile.offset

    data = xr.DataArray(
        cube,
        dims=["band", "y", "x"],
        coords={"band": profile.band_names},
        name="reflectance",
    )
    logger.debug(
        "Loaded %s (%s, %dx%d)", Path(path).name, acquired, meta["width"], meta["height"]
    )
    return Scene(
        path=str(path),
        acquired=acquired,
        sensor=profile.sensor_id,
        data=data,
        transform=meta["transform"],
        crs=meta["crs"],
    )
