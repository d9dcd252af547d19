"""
Efficiency harvesting for numerator/denominator histogram pairs

eff = N_numerator / N_denominator per bin, with the binomial error
sigma_eff = sqrt(eff * (1 - eff) / N_denominator).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

import numpy as np
import pandas as pd

from .exceptions import HistogramError
from .histograms import HistogramPair


class EfficiencyCalculator:
    """Turn booked histogram pairs into efficiency tables."""

    def __init__(self) -> None:
        self.logger = logging.getLogger("RazorMonitor.EfficiencyCalculator")

    @staticmethod
    def efficiency(numerator: np.ndarray, denominator: np.ndarray):
        """
        Bin-wise efficiency and binomial error

        Bins with an empty denominator get efficiency and error 0.

        Returns:
            (efficiency, error) arrays
        """
        numerator = np.asarray(numerator, dtype=np.float64)
        denominator = np.asarray(denominator, dtype=np.float64)

        eff = np.divide(numerator, denominator, out=np.zeros_like(numerator), where=denominator > 0)
        # eff * (1 - eff) can dip below zero by round-off
        var = np.divide(np.clip(eff * (1 - eff), 0.0, None), denominator,
                        out=np.zeros_like(numerator), where=denominator > 0)
        return eff, np.sqrt(var)

    def efficiency_table(self, pair: HistogramPair) -> pd.DataFrame:
        """
        Efficiency per bin of a histogram pair

        Returns:
            DataFrame with bin edges, numerator, denominator, efficiency, error.
            2D pairs get one row per (x, y) bin.
        """
        if not pair.booked:
            raise HistogramError("Histogram pair has not been booked")

        num = pair.numerator.values()
        den = pair.denominator.values()
        eff, err = self.efficiency(num, den)
        axes = pair.denominator.hist.axes

        if pair.denominator.ndim == 1:
            edges = axes[0].edges
            return pd.DataFrame({
                "x_low": edges[:-1],
                "x_high": edges[1:],
                "numerator": num,
                "denominator": den,
                "efficiency": eff,
                "error": err,
            })

        x_edges, y_edges = axes[0].edges, axes[1].edges
        ix, iy = np.meshgrid(np.arange(len(x_edges) - 1), np.arange(len(y_edges) - 1), indexing="ij")
        ix, iy = ix.ravel(), iy.ravel()
        return pd.DataFrame({
            "x_low": x_edges[ix],
            "x_high": x_edges[ix + 1],
            "y_low": y_edges[iy],
            "y_high": y_edges[iy + 1],
            "numerator": num.ravel(),
            "denominator": den.ravel(),
            "efficiency": eff.ravel(),
            "error": err.ravel(),
        })

    def summarize(self, monitor: Any) -> Dict[str, pd.DataFrame]:
        """Efficiency tables for every histogram pair of a monitor."""
        tables = {}
        for name, pair in monitor.pairs.items():
            tables[name] = self.efficiency_table(pair)

            total_num = pair.numerator.values().sum()
            total_den = pair.denominator.values().sum()
            eff, err = self.efficiency(np.array([total_num]), np.array([total_den]))
            self.logger.info(
                f"{name}: integrated efficiency {total_num:.0f}/{total_den:.0f} = {eff[0]:.4f} ± {err[0]:.4f}"
            )
        return tables

    def save_tables(self, tables: Dict[str, pd.DataFrame], output_dir: str) -> Dict[str, Path]:
        """Write efficiency tables as efficiency_<name>.csv."""
        output_dir = Path(output_dir)
        output_dir.mkdir(exist_ok=True, parents=True)

        written = {}
        for name, df in tables.items():
            path = output_dir / f"efficiency_{name}.csv"
            df.to_csv(path, index=False)
            written[name] = path
            self.logger.info(f"Saved: {path}")
        return written
