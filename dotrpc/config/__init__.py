"""Configuration module for dotrpc."""

from dotrpc.config.loader import load_config, save_config, get_config_path
from dotrpc.config.schema import ClientConfig, Config, HttpConfig, LoggingConfig, ServerConfig
from dotrpc.config.access import get_config, clear_config_cache

__all__ = [
    "Config",
    "ServerConfig",
    "ClientConfig",
    "HttpConfig",
    "LoggingConfig",
    "load_config",
    "save_config",
    "get_config_path",
    "get_config",
    "clear_config_cache",
]
