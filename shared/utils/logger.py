"""
Logging utilities for the gateway

Provides centralized logging configuration: stdlib logging handlers with
structlog rendering on top.
"""

import copy
import os
import logging
import logging.config
from typing import Optional, Dict, Any

import structlog
import yaml

# Default logging configuration
DEFAULT_LOGGING_CONFIG: Dict[str, Any] = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'plain': {
            'format': '%(message)s'
        },
        'default': {
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S'
        }
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'level': 'INFO',
            'formatter': 'plain',
            'stream': 'ext://sys.stdout'
        }
    },
    'root': {
        'level': 'INFO',
        'handlers': ['console']
    },
    'loggers': {
        'uvicorn.access': {
            'level': 'WARNING'
        }
    }
}


def load_logging_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load a logging.config dict from a YAML file

    Falls back to the built-in default when no path is given or the file
    does not exist.
    """
    if config_path and os.path.exists(config_path):
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
        if not isinstance(config, dict):
            raise ValueError(f"Logging config {config_path} must be a mapping")
        return config

    return copy.deepcopy(DEFAULT_LOGGING_CONFIG)


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    config_path: Optional[str] = None,
) -> None:
    """
    Setup logging configuration

    Args:
        log_level: Root log level
        log_format: 'json' for machine-readable lines, 'console' for local development
        config_path: Optional YAML file with a logging.config dictionary
    """
    config = load_logging_config(config_path)

    level = log_level.upper()
    config.setdefault('root', {})['level'] = level
    for handler_config in config.get('handlers', {}).values():
        handler_config['level'] = level

    logging.config.dictConfig(config)

    if log_format == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str):
    """
    Get logger instance

    Args:
        name: Logger name (usually __name__)

    Returns:
        structlog logger bound to the stdlib logger of that name
    """
    return structlog.get_logger(name)
