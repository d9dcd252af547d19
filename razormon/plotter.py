"""
Module for plotting razor trigger efficiencies

Example usage:
    plotter = EfficiencyPlotter(output_dir="output/plots")
    plotter.plot_all(monitor)
"""

import logging
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import mplhep as hep
import numpy as np

from .modules.efficiency_calculator import EfficiencyCalculator
from .modules.histograms import HistogramPair

logging.getLogger('matplotlib.font_manager').setLevel(logging.ERROR)

plt.style.use(hep.style.CMS)


class EfficiencyPlotter:
    """Class for creating efficiency plots from histogram pairs"""

    AXIS_LABELS = {
        "MR": r"$M_{R}$ [GeV]",
        "Rsq": r"$R^{2}$",
        "dPhiR": r"$\Delta\phi_{R}$",
        "MRVsRsq": (r"$M_{R}$ [GeV]", r"$R^{2}$"),
    }

    def __init__(self, output_dir):
        """
        Initialize with output directory

        Parameters:
        - output_dir: Directory to save plots
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.logger = logging.getLogger("RazorMonitor.EfficiencyPlotter")
        self.calculator = EfficiencyCalculator()

    def plot_efficiency_1d(self, pair: HistogramPair, name: str) -> Path:
        """Efficiency with binomial errors, denominator shape on a twin axis"""
        table = self.calculator.efficiency_table(pair)
        centers = 0.5 * (table["x_low"] + table["x_high"])
        half_widths = 0.5 * (table["x_high"] - table["x_low"])
        filled = table["denominator"] > 0

        fig, ax = plt.subplots(figsize=(10, 8))
        ax.errorbar(centers[filled], table["efficiency"][filled],
                    xerr=half_widths[filled], yerr=table["error"][filled],
                    fmt="o", color="black", markersize=5, label="Efficiency")
        ax.set_ylim(0, 1.2)
        ax.set_xlabel(self.AXIS_LABELS.get(name, name))
        ax.set_ylabel("Efficiency")

        twin = ax.twinx()
        hep.histplot(pair.denominator.hist, ax=twin, color="tab:blue", alpha=0.4,
                     histtype="fill", label="Denominator")
        twin.set_ylabel("Events")

        hep.cms.label("Preliminary", data=True, ax=ax)
        ax.legend(loc="upper left")

        output_path = self.output_dir / f"efficiency_{name}.pdf"
        fig.savefig(output_path, bbox_inches="tight")
        plt.close(fig)
        self.logger.info(f"Saved: {output_path}")
        return output_path

    def plot_efficiency_2d(self, pair: HistogramPair, name: str) -> Path:
        """Efficiency map for a 2D pair"""
        num = pair.numerator.values()
        den = pair.denominator.values()
        eff, _ = self.calculator.efficiency(num, den)
        eff = np.where(den > 0, eff, np.nan)
        x_edges, y_edges = (axis.edges for axis in pair.denominator.hist.axes)

        fig, ax = plt.subplots(figsize=(10, 8))
        hep.hist2dplot(eff, x_edges, y_edges, ax=ax, cmin=0, cmax=1)
        x_label, y_label = self.AXIS_LABELS.get(name, (name, ""))
        ax.set_xlabel(x_label)
        ax.set_ylabel(y_label)
        hep.cms.label("Preliminary", data=True, ax=ax)

        output_path = self.output_dir / f"efficiency_{name}.pdf"
        fig.savefig(output_path, bbox_inches="tight")
        plt.close(fig)
        self.logger.info(f"Saved: {output_path}")
        return output_path

    def plot_all(self, monitor) -> list:
        """Plot every histogram pair of a monitor"""
        outputs = []
        for name, pair in monitor.pairs.items():
            if pair.denominator.ndim == 2:
                outputs.append(self.plot_efficiency_2d(pair, name))
            else:
                outputs.append(self.plot_efficiency_1d(pair, name))
        return outputs
