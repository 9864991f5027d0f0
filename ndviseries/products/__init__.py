"""
ndviseries Products Module

Sensor profiles: band layout and radiometric scaling per sensor.
"""

from ndviseries.products.profile import (
    BUILTIN_PROFILES,
    SensorProfile,
    SensorRegistry,
    get_registry,
    get_sensor,
    register_sensor,
)

__all__ = [
    "BUILTIN_PROFILES",
    "SensorProfile",
    "SensorRegistry",
    "get_registry",
    "get_sensor",
    "register_sensor",
]
