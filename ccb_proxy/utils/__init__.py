"""
Utility modules for the CCB proxy
"""
from .config_loader import AppConfig, ConfigError, load_app_config
from .logging_context import configure_logging, get_correlation_id, set_correlation_id

__all__ = [
    'AppConfig',
    'ConfigError',
    'load_app_config',
    'configure_logging',
    'get_correlation_id',
    'set_correlation_id',
]
