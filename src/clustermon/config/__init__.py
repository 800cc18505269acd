"""
Configuration management for the clustermon package.

This module provides loading, validation and cached access to the TOML
configuration file.
"""

# Main configuration interface
from .manager import (
    clear_config_cache,
    get_config,
    get_config_info,
    is_config_loaded,
    set_config_path,
)

# For advanced usage - direct access to loaders and validators
from .loader import load_main_config, load_toml_file
from .validators import (
    validate_client_config,
    validate_logging_config,
    validate_metric_types,
    validate_stream_config,
)

__all__ = [
    # Main interface
    "get_config",
    "set_config_path",
    "clear_config_cache",
    "is_config_loaded",
    "get_config_info",
    # Advanced interface
    "load_toml_file",
    "load_main_config",
    "validate_client_config",
    "validate_stream_config",
    "validate_logging_config",
    "validate_metric_types",
]
