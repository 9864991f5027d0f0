"""
ndviseries Core Module

NDVI transform, layer stacking, zonal aggregation, reshaping and exceptions.
"""

from ndviseries.core.exceptions import (
    ConfigurationError,
    DateParseError,
    LabelConflictError,
    LoadError,
    NdviSeriesError,
    ShapeMismatchError,
)
from ndviseries.core.bandmath import ndvi
from ndviseries.core.stack import LayerStack, NdviLayer, build_stack, ndvi_layer, stack_from_files
from ndviseries.core.zonal import count_valid_pixels, region_mask, zonal_means
from ndviseries.core.timeseries import ZonalRecord, parse_layer_date, to_records, to_tidy
from ndviseries.core.pipeline import PipelineConfig, run_pipeline

__all__ = [
    # Classes
    "LayerStack",
    "NdviLayer",
    "PipelineConfig",
    "ZonalRecord",
    # Functions
    "build_stack",
    "count_valid_pixels",
    "ndvi",
    "ndvi_layer",
    "parse_layer_date",
    "region_mask",
    "run_pipeline",
    "stack_from_files",
    "to_records",
    "to_tidy",
    "zonal_means",
    # Exceptions
    "ConfigurationError",
    "DateParseError",
    "LabelConflictError",
    "LoadError",
    "NdviSeriesError",
    "ShapeMismatchError",
]
