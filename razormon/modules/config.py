"""
Configuration of the razor trigger monitor

Loads the monitor parameters from a TOML file (or a plain dictionary),
fills in the defaults of the standard offline configuration and validates
everything before a run starts. Any problem is a ConfigurationError.
"""

from __future__ import annotations

import copy
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Optional

import tomli

from .exceptions import ConfigurationError, SelectionError
from .histograms import float_edges
from .object_selection import CutSelector
from .physics_objects import MissingEnergy, make_jet
from .trigger_flag import TriggerFlagConfig

# Binning from the 2016 offline selection
DEFAULT_MR_BINS = [0., 100., 200., 300., 400., 500., 575., 650., 750., 900., 1200., 1600., 2500., 4000.]
DEFAULT_RSQ_BINS = [0., 0.05, 0.1, 0.15, 0.2, 0.25, 0.30, 0.41, 0.52, 0.64, 0.8, 1.5]
DEFAULT_DPHIR_BINS = [0., 0.5, 1.0, 1.5, 2.0, 2.5, 2.8, 3.0, 3.2]

DEFAULT_CONFIG: Dict[str, Any] = {
    "folder_name": "HLT/SUSY/Razor",
    "met": "pfMet",
    "jets": "ak4PFJetsCHS",
    "hemispheres": "hemispheresDQM",
    "met_selection": "pt > 0",
    # from 2016 offline selection
    "jet_selection": "pt > 80",
    "njets": 2,
    "mr_cut": 300.0,
    "rsq_cut": 0.15,
    "histograms": {
        "mr_bins": DEFAULT_MR_BINS,
        "rsq_bins": DEFAULT_RSQ_BINS,
        "dphir_bins": DEFAULT_DPHIR_BINS,
    },
    "numerator_trigger": None,
    "denominator_trigger": None,
}

_STRING_KEYS = ["folder_name", "met", "jets", "hemispheres", "met_selection", "jet_selection"]
_TRIGGER_BOOL_KEYS = ["and_or", "enabled", "and_or_dcs", "error_reply_dcs", "and_or_hlt", "error_reply_hlt"]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_trigger_config(section: Optional[Dict[str, Any]], name: str) -> TriggerFlagConfig:
    """
    Build a TriggerFlagConfig from a TOML table

    A missing table gives an evaluator with no requirements (always accepts).
    A given table must state `and_or` explicitly.
    """
    if section is None:
        return TriggerFlagConfig()
    if not isinstance(section, dict):
        raise ConfigurationError(f"[{name}] must be a table")

    known = set(TriggerFlagConfig.__dataclass_fields__)
    unknown = set(section) - known
    if unknown:
        raise ConfigurationError(f"[{name}] unknown keys: {sorted(unknown)}")
    if "and_or" not in section:
        raise ConfigurationError(f"[{name}] missing required key 'and_or'")

    for key in _TRIGGER_BOOL_KEYS:
        if key in section and not isinstance(section[key], bool):
            raise ConfigurationError(f"[{name}] '{key}' must be true or false")

    partitions = section.get("dcs_partitions", [])
    if not isinstance(partitions, list) or not all(isinstance(p, int) and not isinstance(p, bool) for p in partitions):
        raise ConfigurationError(f"[{name}] 'dcs_partitions' must be a list of integers")

    paths = section.get("hlt_paths", [])
    if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
        raise ConfigurationError(f"[{name}] 'hlt_paths' must be a list of strings")

    verbosity = section.get("verbosity_level", 1)
    if not isinstance(verbosity, int) or isinstance(verbosity, bool) or verbosity < 0:
        raise ConfigurationError(f"[{name}] 'verbosity_level' must be a non-negative integer")

    return TriggerFlagConfig(**section)


class MonitorConfig:
    """
    Validated configuration of one RazorMonitor instance

    Attributes:
        folder_name: Output folder of the histograms
        met_tag, jet_tag, hemisphere_tag: Input collection tags
        met_selection, jet_selection: Compiled object selections
        njets: Minimum number of selected jets
        mr_cut, rsq_cut: Offline razor thresholds
        mr_bins, rsq_bins, dphir_bins: Bin edges
        numerator_trigger, denominator_trigger: Trigger flag configurations
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        self.logger = logging.getLogger("RazorMonitor.MonitorConfig")

        raw = copy.deepcopy(DEFAULT_CONFIG)
        config = config or {}
        unknown = set(config) - set(DEFAULT_CONFIG)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")

        histograms = config.get("histograms", {})
        if not isinstance(histograms, dict):
            raise ConfigurationError("[histograms] must be a table")
        unknown = set(histograms) - set(DEFAULT_CONFIG["histograms"])
        if unknown:
            raise ConfigurationError(f"[histograms] unknown keys: {sorted(unknown)}")

        raw.update({k: v for k, v in config.items() if k != "histograms"})
        raw["histograms"].update(histograms)
        self.raw = raw

        for key in _STRING_KEYS:
            if not isinstance(raw[key], str):
                raise ConfigurationError(f"'{key}' must be a string")

        self.folder_name: str = raw["folder_name"]
        self.met_tag: str = raw["met"]
        self.jet_tag: str = raw["jets"]
        self.hemisphere_tag: str = raw["hemispheres"]

        self.met_selection = self._selection("met_selection", MissingEnergy(0.0, 0.0))
        self.jet_selection = self._selection("jet_selection", make_jet(0.0, 0.0, 0.0))

        njets = raw["njets"]
        if not isinstance(njets, int) or isinstance(njets, bool) or njets < 0:
            raise ConfigurationError(f"'njets' must be a non-negative integer, got {njets!r}")
        self.njets: int = njets

        for key in ("mr_cut", "rsq_cut"):
            if not _is_number(raw[key]) or not math.isfinite(raw[key]):
                raise ConfigurationError(f"'{key}' must be a finite number, got {raw[key]!r}")
        self.mr_cut = float(raw["mr_cut"])
        self.rsq_cut = float(raw["rsq_cut"])

        # validated here, rounded again at booking
        self.mr_bins: List[float] = self._bins("mr_bins")
        self.rsq_bins: List[float] = self._bins("rsq_bins")
        self.dphir_bins: List[float] = self._bins("dphir_bins")

        self.numerator_trigger = parse_trigger_config(raw["numerator_trigger"], "numerator_trigger")
        self.denominator_trigger = parse_trigger_config(raw["denominator_trigger"], "denominator_trigger")

    def _selection(self, key: str, sample: Any) -> CutSelector:
        """Compile a cut and check that every name in it resolves on a sample object."""
        selector = CutSelector(self.raw[key])
        try:
            selector.check(sample)
        except SelectionError as e:
            raise ConfigurationError(f"'{key}': {e}") from e
        return selector

    def _bins(self, key: str) -> List[float]:
        edges = self.raw["histograms"][key]
        if not isinstance(edges, list):
            raise ConfigurationError(f"[histograms] '{key}' must be a list of bin edges")
        float_edges(edges, key)
        return [float(e) for e in edges]

    @classmethod
    def from_toml(cls, config_path: str) -> "MonitorConfig":
        """
        Load configuration from a TOML file

        Raises:
            ConfigurationError: If file not found, parsing fails or values are invalid
        """
        config_path = Path(config_path)
        try:
            with open(config_path, "rb") as f:
                config = tomli.load(f)
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {config_path}")
        except tomli.TOMLDecodeError as e:
            raise ConfigurationError(f"Error parsing TOML file {config_path}: {e}")

        instance = cls(config)
        instance.logger.info(f"Loaded monitor configuration from {config_path}")
        return instance

    def __repr__(self) -> str:
        return (f"MonitorConfig(folder={self.folder_name!r}, njets={self.njets}, "
                f"mr_cut={self.mr_cut}, rsq_cut={self.rsq_cut})")
