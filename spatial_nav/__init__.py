"""Directional (arrow-key / d-pad) focus navigation between on-screen elements."""

from spatial_nav.config import Direction, EnterTo, NavConfig, Restrict, load_nav_config
from spatial_nav.errors import ConfigFileError, NavigationConfigError, SectionExistsError, UnknownSectionError
from spatial_nav.events import EventBus, LifecycleEvent, NavEvent
from spatial_nav.logging_utils import configure_package_logger
from spatial_nav.memory_host import InMemoryHost, MemoryElement
from spatial_nav.navigator import SpatialNavigator

configure_package_logger()

__all__ = [
    "ConfigFileError",
    "Direction",
    "EnterTo",
    "EventBus",
    "InMemoryHost",
    "LifecycleEvent",
    "MemoryElement",
    "NavConfig",
    "NavEvent",
    "NavigationConfigError",
    "Restrict",
    "SectionExistsError",
    "SpatialNavigator",
    "UnknownSectionError",
    "load_nav_config",
]
