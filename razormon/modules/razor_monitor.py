"""
Razor trigger efficiency monitor

The razor inclusive analysis measures its trigger efficiency in events
selected by an orthogonal reference trigger, as a 2D function of the razor
variables M_R and R^2. dPhi_R, used offline against QCD and detector-related
MET tails, is monitored as well.

For every event the monitor applies the reference (denominator) trigger, the
MET and jet selections, computes the razor variables from the hemispheres
produced upstream and fills denominator histograms; events also passing the
trigger under study (numerator) fill the numerator histograms.
"""

from __future__ import annotations

import logging
from collections import Counter
from enum import IntEnum
from typing import Any, Optional, Sequence

from .config import MonitorConfig
from .histograms import HistogramBooker, HistogramPair
from .kinematics import RazorVariables, compute_razor_variables
from .trigger_flag import TriggerEventFlag

# Hemisphere multiplicities produced by the hemisphere maker:
# 0 = too many jets, 2 = no leptons, 5/10 = one/two extra leptons
VALID_HEMISPHERE_COUNTS = (0, 2, 5, 10)


class Stage(IntEnum):
    """Where processing of an event stopped."""
    DenominatorPreselection = 0
    MissingEnergy = 1
    Jets = 2
    HemispheresMissing = 3
    HemispheresEmpty = 4
    HemispheresInvalid = 5
    OfflineCuts = 6
    DenominatorTrigger = 7
    NumeratorTrigger = 8
    Passed = 9


class RazorMonitor:
    """
    Numerator/denominator histogram filler for razor triggers

    Attributes:
        config: MonitorConfig
        num_flag, den_flag: Trigger-decision evaluators (`enabled()`, `accepts(event)`)
        MR_ME, Rsq_ME, dPhiR_ME, MRVsRsq_ME: Histogram pairs
        cutflow: Counter of the stage at which each event stopped
    """

    def __init__(self, config: Optional[MonitorConfig] = None,
                 num_flag: Any = None, den_flag: Any = None) -> None:
        self.logger = logging.getLogger("RazorMonitor.RazorMonitor")
        self.error_logger = logging.getLogger("RazorMonitor.DQM_HLT_Razor")

        self.config = config if config is not None else MonitorConfig()
        self.num_flag = num_flag if num_flag is not None else TriggerEventFlag(
            self.config.numerator_trigger, name="NumeratorTrigger")
        self.den_flag = den_flag if den_flag is not None else TriggerEventFlag(
            self.config.denominator_trigger, name="DenominatorTrigger")

        self.MR_ME = HistogramPair()
        self.Rsq_ME = HistogramPair()
        self.dPhiR_ME = HistogramPair()
        self.MRVsRsq_ME = HistogramPair()

        self.cutflow: Counter = Counter()

    @property
    def pairs(self):
        return {
            "MR": self.MR_ME,
            "Rsq": self.Rsq_ME,
            "dPhiR": self.dPhiR_ME,
            "MRVsRsq": self.MRVsRsq_ME,
        }

    @staticmethod
    def book_me(booker: HistogramBooker, me: HistogramPair, histname: str, histtitle: str,
                binning: Sequence[float], binning_y: Optional[Sequence[float]] = None) -> None:
        """Book a numerator/denominator pair with variable binning."""
        if binning_y is None:
            me.numerator = booker.book1d_variable(histname + "_numerator", histtitle + " (numerator)", binning)
            me.denominator = booker.book1d_variable(histname + "_denominator", histtitle + " (denominator)", binning)
        else:
            me.numerator = booker.book2d_variable(histname + "_numerator", histtitle + " (numerator)",
                                                  binning, binning_y)
            me.denominator = booker.book2d_variable(histname + "_denominator", histtitle + " (denominator)",
                                                    binning, binning_y)

    def book_histograms(self, booker: HistogramBooker, run: Any = None) -> None:
        """Book all histograms for a run and initialise the trigger flags."""
        booker.set_current_folder(self.config.folder_name)

        # 1D hist, MR
        self.book_me(booker, self.MR_ME, "MR", "PF MR", self.config.mr_bins)
        self.MR_ME.set_titles("PF M_{R} [GeV]", "events / [GeV]")

        # 1D hist, Rsq
        self.book_me(booker, self.Rsq_ME, "Rsq", "PF Rsq", self.config.rsq_bins)
        self.Rsq_ME.set_titles("PF R^{2}", "events")

        # 1D hist, dPhiR
        self.book_me(booker, self.dPhiR_ME, "dPhiR", "dPhiR", self.config.dphir_bins)
        self.dPhiR_ME.set_titles("dPhi_{R}", "events")

        # 2D hist, MR & Rsq
        self.book_me(booker, self.MRVsRsq_ME, "MRVsRsq", "PF MR vs PF Rsq",
                     self.config.mr_bins, self.config.rsq_bins)
        self.MRVsRsq_ME.set_titles("M_{R} [GeV]", "R^{2}")

        for flag in (self.num_flag, self.den_flag):
            if flag is not None and flag.enabled():
                flag.init_run(run)

        self.logger.info(f"Booked razor histograms in {self.config.folder_name}")

    def analyze(self, event: Any) -> Stage:
        """Process one event and return the stage at which it stopped."""
        stage = self._analyze(event)
        self.cutflow[stage] += 1
        return stage

    def _analyze(self, event: Any) -> Stage:
        # Filter out events if trigger filtering is requested
        if self.den_flag.enabled() and not self.den_flag.accepts(event):
            return Stage.DenominatorPreselection

        met_collection = event.get_by_tag(self.config.met_tag)
        if not met_collection:
            return Stage.MissingEnergy
        if not self.config.met_selection(met_collection[0]):
            return Stage.MissingEnergy

        jets = event.get_by_tag(self.config.jet_tag) or []
        if len(jets) < self.config.njets:
            return Stage.Jets
        selected_jets = [j for j in jets if self.config.jet_selection(j)]
        if len(selected_jets) < self.config.njets:
            return Stage.Jets

        # razor hemisphere clustering from previous step
        hemispheres = event.get_by_tag(self.config.hemisphere_tag)
        if hemispheres is None:
            return Stage.HemispheresMissing

        if len(hemispheres) == 0:
            # the hemisphere maker produces no hemispheres if the number of jets is too high
            self.error_logger.error(
                "Cannot calculate M_R and R^2 because there are too many jets! "
                "(trigger passed automatically without forming the hemispheres)"
            )
            return Stage.HemispheresEmpty

        if len(hemispheres) not in VALID_HEMISPHERE_COUNTS:
            self.error_logger.error(f"Invalid hemisphere collection!  hemispheres->size() = {len(hemispheres)}")
            return Stage.HemispheresInvalid

        razor = compute_razor_variables(hemispheres, met_collection)

        # apply offline selection cuts
        if razor.rsq < self.config.rsq_cut and razor.mr < self.config.mr_cut:
            return Stage.OfflineCuts

        # applying selection for denominator
        if self.den_flag.enabled() and not self.den_flag.accepts(event):
            return Stage.DenominatorTrigger

        self._fill(razor, "denominator")

        # applying selection for numerator
        if self.num_flag.enabled() and not self.num_flag.accepts(event):
            return Stage.NumeratorTrigger

        self._fill(razor, "numerator")
        return Stage.Passed

    def _fill(self, razor: RazorVariables, which: str) -> None:
        if razor.rsq >= self.config.rsq_cut:
            getattr(self.MR_ME, which).fill(razor.mr)

        if razor.mr >= self.config.mr_cut:
            getattr(self.Rsq_ME, which).fill(razor.rsq)

        getattr(self.dPhiR_ME, which).fill(razor.dphi_r)

        getattr(self.MRVsRsq_ME, which).fill(razor.mr, razor.rsq)

    def report_cutflow(self) -> None:
        """Log how many events stopped at each stage."""
        total = sum(self.cutflow.values())
        self.logger.info(f"Razor monitor cut-flow ({total} events):")
        for stage in Stage:
            self.logger.info(f"  {stage.name:<24} {self.cutflow.get(stage, 0)}")
