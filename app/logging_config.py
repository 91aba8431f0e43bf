"""Logging utilities."""

import logging
import sys
from typing import Optional, Union

DEFAULT_FORMAT = "[%(asctime)s] %(levelname)s %(name)s - %(message)s"


def setup_logging(
    level: Union[int, str] = logging.INFO,
    format_str: Optional[str] = None
) -> logging.Logger:
    """
    Setup logging for the API and the checker engine.

    Args:
        level: Logging level, as a number or a name like "DEBUG" (default: INFO)
        format_str: Custom format string

    Returns:
        Configured application logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if format_str is None:
        format_str = DEFAULT_FORMAT

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    for name in ("app", "code_quality_checker"):
        logging.getLogger(name).setLevel(level)

    return logging.getLogger("app")
