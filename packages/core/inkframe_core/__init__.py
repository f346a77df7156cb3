"""Core app services for settings, logging, and the weather cache."""

from .config import AppConfig, config_path, load_config, save_config
from .logging_setup import configure_logging, get_logger
from .weather_cache import WeatherCache, city_key, coordinates_key, describe_icon

__all__ = [
    "AppConfig",
    "WeatherCache",
    "city_key",
    "config_path",
    "configure_logging",
    "coordinates_key",
    "describe_icon",
    "get_logger",
    "load_config",
    "save_config",
]
