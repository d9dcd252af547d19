"""Core modules of the razor trigger monitor."""

from .config import MonitorConfig
from .exceptions import (
    BranchMissingError,
    ConfigurationError,
    DataLoadError,
    HistogramError,
    RazorMonitorError,
    SelectionError,
)
from .histograms import HistogramPair, HistogramStore, MonitorElement
from .kinematics import RazorVariables, calc_mr, calc_r, compute_razor_variables
from .physics_objects import Event, MissingEnergy, Run, make_hemisphere, make_jet
from .razor_monitor import RazorMonitor, Stage
from .trigger_flag import TriggerEventFlag, TriggerFlagConfig

__all__ = [
    "BranchMissingError",
    "ConfigurationError",
    "DataLoadError",
    "Event",
    "HistogramError",
    "HistogramPair",
    "HistogramStore",
    "MissingEnergy",
    "MonitorConfig",
    "MonitorElement",
    "RazorMonitor",
    "RazorMonitorError",
    "RazorVariables",
    "Run",
    "SelectionError",
    "Stage",
    "TriggerEventFlag",
    "TriggerFlagConfig",
    "calc_mr",
    "calc_r",
    "compute_razor_variables",
    "make_hemisphere",
    "make_jet",
]
