"""
ndviseries Exceptions

Exception hierarchy for error handling.
"""


class NdviSeriesError(Exception):
    """Base exception for ndviseries"""

    pass


class LoadError(NdviSeriesError):
    """Raster or vector input could not be read"""

    pass


class ShapeMismatchError(NdviSeriesError):
    """Grid dimensions are inconsistent within a stack"""

    pass


class LabelConflictError(NdviSeriesError):
    """Two layers share the same label"""

    pass


class DateParseError(NdviSeriesError):
    """A file name or layer label does not encode a date"""

    pass


class ConfigurationError(NdviSeriesError):
    """Unknown sensor or invalid profile"""

    pass
