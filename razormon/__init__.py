"""
Razor trigger efficiency monitor

Fills numerator/denominator histograms of the razor variables M_R, R^2 and
dPhi_R for trigger efficiency measurements.
"""

from .modules import (
    Event,
    HistogramStore,
    MissingEnergy,
    MonitorConfig,
    RazorMonitor,
    Run,
    Stage,
    TriggerEventFlag,
    make_hemisphere,
    make_jet,
)

__version__ = "0.1.0"

__all__ = [
    "Event",
    "HistogramStore",
    "MissingEnergy",
    "MonitorConfig",
    "RazorMonitor",
    "Run",
    "Stage",
    "TriggerEventFlag",
    "make_hemisphere",
    "make_jet",
]
