"""
ndviseries - NDVI time series over study regions from multi-band scenes

Loads a series of multi-band satellite scenes, computes NDVI per scene,
stacks the layers by acquisition date and summarizes them per polygon region
into a tidy (region, label, date, value) table ready for plotting.

Quick Start:
    >>> import ndviseries as nds
    >>>
    >>> # One call: directory of scenes + region polygons -> tidy table
    >>> tidy = nds.run_pipeline("./scenes/", "./sites.shp")
    >>>
    >>> # Step by step
    >>> stack = nds.stack_from_files(nds.find_scenes("./scenes/"), sensor="landsat8_oli")
    >>> wide = nds.zonal_means(stack, nds.load_regions("./sites.shp"))
    >>> tidy = nds.to_tidy(wide, sort=True)
"""

from ndviseries.core import (
    # Exceptions
    ConfigurationError,
    DateParseError,
    LabelConflictError,
    # Classes
    LayerStack,
    LoadError,
    NdviLayer,
    NdviSeriesError,
    PipelineConfig,
    ShapeMismatchError,
    ZonalRecord,
    # Functions
    build_stack,
    count_valid_pixels,
    ndvi,
    ndvi_layer,
    parse_layer_date,
    run_pipeline,
    stack_from_files,
    to_records,
    to_tidy,
    zonal_means,
)
from ndviseries.io import Region, Scene, find_scenes, load_regions, load_scene
from ndviseries.products import SensorProfile, get_sensor, register_sensor

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "DateParseError",
    "LabelConflictError",
    "LayerStack",
    "LoadError",
    "NdviLayer",
    "NdviSeriesError",
    "PipelineConfig",
    "Region",
    "Scene",
    "SensorProfile",
    "ShapeMismatchError",
    "ZonalRecord",
    "__version__",
    "build_stack",
    "count_valid_pixels",
    "create_sample_data",
    "find_scenes",
    "get_sensor",
    "load_regions",
    "load_scene",
    "ndvi",
    "ndvi_layer",
    "parse_layer_date",
    "register_sensor",
    "run_pipeline",
    "stack_from_files",
    "to_records",
    "to_tidy",
    "zonal_means",
]


# Lazy import (avoids writing-side imports at startup)
def __getattr__(name):
    if name == "create_sample_data":
        from ndviseries.sample_data import create_sample_data

        return create_sample_data
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
