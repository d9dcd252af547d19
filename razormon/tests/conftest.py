"""
Global pytest fixtures and configuration for the test suite.

Provides reusable fixtures for testing monitor components without
duplicating setup code across test modules.
"""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator

import pytest

from razormon.modules.config import MonitorConfig
from razormon.modules.histograms import HistogramStore
from razormon.modules.razor_monitor import RazorMonitor
from razormon.tests.utils import StubFlag


@pytest.fixture
def tmp_test_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for test operations.

    Automatically cleaned up after test completion.

    Yields:
        Path to temporary directory
    """
    tmp_dir = Path(tempfile.mkdtemp(prefix="razormon_test_"))
    try:
        yield tmp_dir
    finally:
        if tmp_dir.exists():
            shutil.rmtree(tmp_dir)


@pytest.fixture
def scenario_config_dict() -> Dict[str, Any]:
    """
    Configuration for the single-event reference scenario.

    One jet above 80 GeV suffices and the razor thresholds sit just below the
    reference event (M_R = 650, R^2 = 0.0414), so every histogram is filled.
    """
    return {
        "njets": 1,
        "mr_cut": 300.0,
        "rsq_cut": 0.04,
    }


@pytest.fixture
def scenario_config(scenario_config_dict: Dict[str, Any]) -> MonitorConfig:
    return MonitorConfig(scenario_config_dict)


@pytest.fixture
def store() -> HistogramStore:
    return HistogramStore()


@pytest.fixture
def make_monitor(store: HistogramStore):
    """
    Factory for booked monitors.

    Args (of the returned callable):
        config: MonitorConfig or dict (defaults to the built-in configuration)
        num_flag, den_flag: Injected trigger flags (StubFlag disabled if None)

    Returns:
        Callable creating a booked RazorMonitor
    """
    def _make(config: Any = None, num_flag: Any = None, den_flag: Any = None) -> RazorMonitor:
        if isinstance(config, dict):
            config = MonitorConfig(config)
        monitor = RazorMonitor(
            config,
            num_flag=num_flag if num_flag is not None else StubFlag(on=False),
            den_flag=den_flag if den_flag is not None else StubFlag(on=False),
        )
        monitor.book_histograms(store.booker())
        return monitor

    return _make
