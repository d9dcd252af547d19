"""
Logging and Warning Configuration Utilities

This module provides centralized control over logging, warning messages and
progress bars for the razor monitor.

Usage:
    from razormon.utils.logging_config import setup_logging, suppress_warnings
    setup_logging(verbose=False)
    suppress_warnings()  # Suppress library warnings by default

    # Via environment variable:
    export RAZORMON_WARNINGS=on  # Show warnings
    export RAZORMON_WARNINGS=off  # Suppress warnings (default)
"""

import logging
import os
import warnings
from typing import Literal


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure logging level"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    return logging.getLogger("RazorMonitor")


def suppress_warnings(level: Literal["off", "error", "default", "all"] = "off") -> None:
    """
    Configure warning levels for the monitor.

    Args:
        level: Warning level to set
            - 'off': Suppress all warnings (default for batch running)
            - 'error': Turn warnings into errors
            - 'default': Show important warnings but filter common noise
            - 'all': Show everything (useful for debugging)

    Environment variable RAZORMON_WARNINGS overrides the level parameter.
    """
    env_level = os.environ.get("RAZORMON_WARNINGS", "").lower()
    if env_level in ["on", "yes", "true", "1"]:
        level = "all"
    elif env_level in ["off", "no", "false", "0"]:
        level = "off"
    elif env_level in ["error", "default"]:
        level = env_level

    if level == "off":
        warnings.filterwarnings("ignore")

    elif level == "error":
        warnings.filterwarnings("error")
        warnings.filterwarnings("ignore", category=DeprecationWarning)
        warnings.filterwarnings("ignore", category=FutureWarning)

    elif level == "default":
        warnings.filterwarnings("default")
        warnings.filterwarnings("ignore", category=DeprecationWarning)
        warnings.filterwarnings("ignore", message=".*uproot.*")
        warnings.filterwarnings("ignore", message=".*awkward.*")

    elif level == "all":
        warnings.filterwarnings("default")

    _suppress_library_warnings(level)


def _suppress_library_warnings(level: str) -> None:
    """Suppress known noisy warnings from specific libraries."""
    if level in ["off", "error", "default"]:
        warnings.filterwarnings("ignore", module="awkward.*")
        warnings.filterwarnings("ignore", module="uproot.*")
        warnings.filterwarnings("ignore", message=".*Matplotlib.*")


def enable_progress_bars() -> bool:
    """
    Check if progress bars should be enabled.

    Can be controlled via RAZORMON_PROGRESS environment variable.
    """
    env_progress = os.environ.get("RAZORMON_PROGRESS", "on").lower()
    return env_progress in ["on", "yes", "true", "1"]


def get_tqdm_kwargs(desc: str = "", **kwargs) -> dict:
    """
    Get standard kwargs for tqdm progress bars with consistent styling.

    Args:
        desc: Description for the progress bar
        **kwargs: Additional tqdm parameters

    Returns:
        Dictionary of tqdm parameters
    """
    default_kwargs = {
        "desc": desc,
        "unit": "evt",
        "ncols": 80,
        "bar_format": "{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]",
        "disable": not enable_progress_bars(),
    }
    default_kwargs.update(kwargs)
    return default_kwargs
