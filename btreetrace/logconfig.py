#!/usr/bin/env python3
"""
Logging setup for btreetrace entry points.

Library modules only create module loggers; the shell and the server call
configure_logging() once at startup.
"""

import logging
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging at the given (or configured) level"""
    if level is None:
        from .config import get_config
        level = get_config().log_level

    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT
    )
    # uvicorn's access log is noisy at INFO
    logging.getLogger("uvicorn.access").setLevel("WARNING")
