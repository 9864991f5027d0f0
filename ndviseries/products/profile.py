"""
Sensor Profile system for multi-sensor support.

Maps standard band names to file layers so that scenes from different
sensors are read with the correct band order. The mapping is configuration,
never inferred from file metadata.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from ndviseries.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SENSOR = "landsat8_oli"


@dataclass
class SensorProfile:
    """
    Defines a sensor's band layout and radiometric scaling.

    Attributes:
        sensor_id: Unique identifier (e.g. "landsat8_oli")
        bands: Band name to file layer index mapping (1-based, GDAL convention)
        sensor_bands: Band name to physical sensor band number
        resolution: Spatial resolution in meters
        provider: Data provider (e.g. "USGS", "ESA")
        description: Human-readable description
        scale_factor: Multiplier applied to raw values to get reflectance
        offset: Additive offset applied after scaling
        nodata: No-data value overriding the one stored in the file

    Examples:
        >>> profile = SensorProfile(
        ...     sensor_id="my_drone",
        ...     bands={"red": 1, "green": 2, "blue": 3, "nir": 4},
        ...     sensor_bands={"red": 1, "green": 2, "blue": 3, "nir": 4},
        ...     resolution=0.05,
        ...     provider="DJI",
        ... )
    """

    sensor_id: str
    bands: dict[str, int]
    sensor_bands: dict[str, int] = field(default_factory=dict)
    resolution: float = 30.0
    provider: str = ""
    description: str = ""
    scale_factor: float = 1.0
    offset: float = 0.0
    nodata: float | None = None

    def __post_init__(self):
        layers = sorted(self.bands.values())
        if layers != list(range(1, len(layers) + 1)):
            raise ConfigurationError(
                f"Sensor {self.sensor_id!r}: band layers must be 1..{len(layers)}, got {layers}"
            )
        for required in ("red", "nir"):
            if required not in self.bands:
                raise ConfigurationError(
                    f"Sensor {self.sensor_id!r} has no {required!r} band"
                )

    @property
    def band_names(self) -> list[str]:
        """Band names sorted by file layer."""
        return [k for k, _ in sorted(self.bands.items(), key=lambda x: x[1])]

    @property
    def band_count(self) -> int:
        return len(self.bands)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sensor_id": self.sensor_id,
            "bands": self.bands,
            "sensor_bands": self.sensor_bands,
            "resolution": self.resolution,
            "provider": self.provider,
            "description": self.description,
            "scale_factor": self.scale_factor,
            "offset": self.offset,
            "nodata": self.nodata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SensorProfile":
        return cls(
            sensor_id=data["sensor_id"],
            bands=data["bands"],
            sensor_bands=data.get("sensor_bands", {}),
            resolution=data.get("resolution", 30.0),
            provider=data.get("provider", ""),
            description=data.get("description", ""),
            scale_factor=data.get("scale_factor", 1.0),
            offset=data.get("offset", 0.0),
            nodata=data.get("nodata"),
        )

    def __repr__(self):
        bands_str = ", ".join(
            f"{self.sensor_bands.get(name, '?')}:{name}" for name in self.band_names
        )
        return (
            f"<SensorProfile: {self.sensor_id}>\n"
            f"  Provider: {self.provider}\n"
            f"  Bands: [{bands_str}]\n"
            f"  Resolution: {self.resolution}m"
        )


_LANDSAT_OLI_BANDS = {"blue": 1, "green": 2, "red": 3, "nir": 4, "swir_1": 5, "swir_2": 6}
_LANDSAT_OLI_SENSOR_BANDS = {"blue": 2, "green": 3, "red": 4, "nir": 5, "swir_1": 6, "swir_2": 7}

# Built-in profiles for common sensors
BUILTIN_PROFILES = {
    "landsat8_oli": SensorProfile(
        sensor_id="landsat8_oli",
        bands=dict(_LANDSAT_OLI_BANDS),
        sensor_bands=dict(_LANDSAT_OLI_SENSOR_BANDS),
        resolution=30.0,
        provider="USGS",
        description="Landsat 8 OLI surface reflectance, bands 2-7, pre-scaled",
    ),
    "landsat8_c2l2": SensorProfile(
        sensor_id="landsat8_c2l2",
        bands=dict(_LANDSAT_OLI_BANDS),
        sensor_bands=dict(_LANDSAT_OLI_SENSOR_BANDS),
        resolution=30.0,
        provider="USGS",
        description="Landsat 8 Collection 2 Level-2 digital numbers, bands 2-7",
        scale_factor=0.0000275,
        offset=-0.2,
        nodata=0,
    ),
    "sentinel2_l2a": SensorProfile(
        sensor_id="sentinel2_l2a",
        bands={"blue": 1, "green": 2, "red": 3, "nir": 4, "swir_1": 5, "swir_2": 6},
        sensor_bands={"blue": 2, "green": 3, "red": 4, "nir": 8, "swir_1": 11, "swir_2": 12},
        resolution=10.0,
        provider="ESA",
        description="Sentinel-2 Level-2A surface reflectance, bands 2/3/4/8/11/12",
        scale_factor=0.0001,
        nodata=0,
    ),
}


class SensorRegistry:
    """
    In-memory registry of sensor profiles.

    Includes built-in profiles and user-registered profiles.
    """

    def __init__(self):
        self._profiles: dict[str, SensorProfile] = dict(BUILTIN_PROFILES)

    def register(self, profile: SensorProfile) -> None:
        """Register a sensor profile."""
        self._profiles[profile.sensor_id] = profile
        logger.info("Registered sensor profile: %s", profile.sensor_id)

    def get(self, sensor_id: str) -> SensorProfile:
        """Get a profile by sensor_id."""
        try:
            return self._profiles[sensor_id]
        except KeyError:
            raise ConfigurationError(
                f"Unknown sensor {sensor_id!r}; known sensors: {', '.join(self.list_sensors())}"
            ) from None

    def list_sensors(self) -> list[str]:
        """List all registered sensor IDs."""
        return sorted(self._profiles.keys())


# Global registry instance
_global_registry = SensorRegistry()


def register_sensor(
    sensor_id: str,
    bands: dict[str, int],
    sensor_bands: dict[str, int] | None = None,
    resolution: float = 30.0,
    provider: str = "",
    description: str = "",
    scale_factor: float = 1.0,
    offset: float = 0.0,
    nodata: float | None = None,
) -> SensorProfile:
    """
    Register a sensor profile in the global registry.

    Args:
        sensor_id: Unique identifier
        bands: Band name to 1-based file layer mapping
        sensor_bands: Band name to physical sensor band number
        resolution: Spatial resolution in meters
        provider: Data provider name
        description: Human-readable description
        scale_factor: Raw value to reflectance multiplier
        offset: Additive offset after scaling
        nodata: No-data override

    Returns:
        The created SensorProfile

    Raises:
        ConfigurationError: If the band layout is invalid
    """
    profile = SensorProfile(
        sensor_id=sensor_id,
        bands=bands,
        sensor_bands=sensor_bands or {},
        resolution=resolution,
        provider=provider,
        description=description,
        scale_factor=scale_factor,
        offset=offset,
        nodata=nodata,
    )
    _global_registry.register(profile)
    return profile


def get_sensor(sensor: "str | SensorProfile") -> SensorProfile:
    """Resolve a sensor id (or pass through a profile)."""
    if isinstance(sensor, SensorProfile):
        return sensor
    return _global_registry.get(sensor)


def get_registry() -> SensorRegistry:
    """Get the global sensor registry."""
    return _global_registry
