"""
Logging configuration for applications using the PowerFlex client.

The library itself only creates module loggers under the mgmt, sdc and shared
packages. Applications call setup_logging() once; it attaches the handlers and
applies the environment toggles to the client's loggers:

- POWERFLEX_DEBUG: all client loggers log at DEBUG
- POWERFLEX_SHOWHTTP: mgmt.client logs request/response traces at DEBUG,
  the rest keep the base level
- urllib3 connection messages stay at WARNING unless debugging
"""

import logging
import sys
from pathlib import Path
from typing import Dict, Optional

from shared.config import debug_enabled, show_http_enabled

CLIENT_LOGGERS = ("mgmt", "sdc", "shared")
HTTP_TRACE_LOGGER = "mgmt.client"
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def client_log_levels(level: Optional[int] = None) -> Dict[str, int]:
    """
    Levels for the client's loggers implied by the environment.

    Args:
        level: Base level; defaults to DEBUG when POWERFLEX_DEBUG is set,
            INFO otherwise

    Returns:
        Mapping of logger name to level
    """
    debug = debug_enabled()
    if level is None:
        level = logging.DEBUG if debug else logging.INFO

    levels = {name: level for name in CLIENT_LOGGERS}
    if show_http_enabled():
        levels[HTTP_TRACE_LOGGER] = logging.DEBUG
    levels["urllib3"] = logging.DEBUG if debug else logging.WARNING
    return levels


def setup_logging(
    component_name: str,
    level: Optional[int] = None,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
):
    """
    Configure logging for an application embedding the PowerFlex client.

    Args:
        component_name: Application component identifier (e.g., 'inventory')
        level: Base level for the client loggers (default from POWERFLEX_DEBUG)
        log_file: Optional file path for log output
        format_string: Custom format string (default provided)

    Returns:
        Logger named after the component
    """
    levels = client_log_levels(level)
    base_level = levels[CLIENT_LOGGERS[0]]

    if format_string is None:
        format_string = f'[%(asctime)s] [{component_name.upper()}] %(name)s %(levelname)s - %(message)s'

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=base_level, format=format_string, datefmt=DATE_FORMAT, handlers=handlers)

    for name, name_level in levels.items():
        logging.getLogger(name).setLevel(name_level)

    logger = logging.getLogger(component_name)
    logger.setLevel(base_level)
    logger.info(
        f"{component_name.upper()} logging initialized (level={logging.getLevelName(base_level)}, "
        f"http_trace={levels[HTTP_TRACE_LOGGER] == logging.DEBUG})"
    )
    return logger
