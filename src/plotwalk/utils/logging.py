"""Logger setup for plotwalk.

Every plotwalk module logs through ``get_logger(__name__)``: summarize()
reports group counts, the renderer warns about groups too small to fit, the
config loader warns about values it had to reset, and save_figure() records
what it wrote. The package only installs a NullHandler, so nothing is printed
until an entry point asks for it.

Entry points (``python -m plotwalk.tutorial``, the marimo notebook and
``examples/example_script.py``) call ``configure_logging()``, which attaches
one stderr handler to the "plotwalk" logger. The level comes from the
``--log-level`` option, else the PLOTWALK_LOG_LEVEL environment variable,
else INFO. No log files are written.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Union

# Default format for plotwalk logs
DEFAULT_FMT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d:%(funcName)s: %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(
    level: Optional[Union[str, int]] = None,
    *,
    fmt: Optional[str] = None,
    datefmt: Optional[str] = None,
    force: bool = False,
) -> None:
    """
    Configure logging for the plotwalk logger only (never root).

    Parameters
    ----------
    level:
        Logging level (e.g. "DEBUG", "INFO"). Defaults to PLOTWALK_LOG_LEVEL
        env var, or "INFO" if unset.
    fmt:
        Log message format. Defaults to a standard format.
    datefmt:
        Date format. Defaults to "%Y-%m-%d %H:%M:%S".
    force:
        If True, remove existing handlers before adding new ones (allows
        reconfiguration). If False, skip if handler already present.
    """
    if level is None:
        level = os.environ.get("PLOTWALK_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("plotwalk")
    logger.setLevel(level)

    formatter = logging.Formatter(fmt=fmt or DEFAULT_FMT, datefmt=datefmt or DEFAULT_DATEFMT)

    if force:
        for h in logger.handlers[:]:
            h.close()
            logger.removeHandler(h)
    else:
        for h in logger.handlers:
            if isinstance(h, logging.StreamHandler) and h.stream is sys.stderr:
                return

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(formatter)
    logger.addHandler(console)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger by name. If name is None, returns the 'plotwalk' logger.
    """
    if name is None:
        name = "plotwalk"
    return logging.getLogger(name)
