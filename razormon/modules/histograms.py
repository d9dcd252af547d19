"""
Histogram store for monitoring output

A small booking/filling service on top of `hist`: histograms are booked once
per run under a folder, filled event by event, and finally written into a
ROOT file with `uproot`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterator, Optional, Sequence, Tuple

import hist
import numpy as np
import uproot

from .exceptions import ConfigurationError, HistogramError


def float_edges(edges: Sequence[float], name: str = "binning") -> np.ndarray:
    """
    Validate bin edges and round them through single precision

    Raises:
        ConfigurationError: If fewer than two edges or not strictly increasing
    """
    try:
        arr = np.asarray(edges, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name}: bin edges must be numbers ({e})") from e

    if arr.ndim != 1 or arr.size < 2:
        raise ConfigurationError(f"{name}: need at least two bin edges, got {list(edges)}")
    if not np.all(np.isfinite(arr)):
        raise ConfigurationError(f"{name}: bin edges must be finite, got {list(edges)}")

    # histograms are booked with float edges
    rounded = arr.astype(np.float32).astype(np.float64)
    if not np.all(np.diff(rounded) > 0):
        raise ConfigurationError(f"{name}: bin edges must be strictly increasing, got {list(edges)}")
    return rounded


class MonitorElement:
    """
    One booked histogram

    Attributes:
        path: Full path folder/name
        name: Histogram name
        title: Histogram title
        kind: "TH1F", "TH2F" or "TProfile"
        hist: Underlying hist.Hist
        y_title: Title of the value axis for 1D histograms and profiles
    """

    def __init__(self, path: str, name: str, title: str, kind: str, histogram: hist.Hist,
                 y_range: Optional[Tuple[float, float]] = None) -> None:
        self.path = path
        self.name = name
        self.title = title
        self.kind = kind
        self.hist = histogram
        self.y_title = ""
        self.y_range = y_range
        self._entries = 0

    @property
    def ndim(self) -> int:
        return 2 if self.kind == "TH2F" else 1

    @property
    def entries(self) -> int:
        """Number of fill calls, including under/overflow and NaN entries."""
        return self._entries

    def fill(self, x: float, y: Optional[float] = None) -> None:
        if self.kind == "TH2F":
            if y is None:
                raise HistogramError(f"{self.path}: 2D histogram needs two coordinates")
            self.hist.fill(x, y)
        elif self.kind == "TProfile":
            if y is None:
                raise HistogramError(f"{self.path}: profile needs a value to average")
            low, high = self.y_range
            if not (low <= y <= high):
                return
            self.hist.fill(x, sample=y)
        else:
            if y is not None:
                raise HistogramError(f"{self.path}: 1D histogram filled with two coordinates")
            self.hist.fill(x)
        self._entries += 1

    def set_axis_title(self, title: str, axis: int = 1) -> None:
        """Set the title of axis 1 (x) or 2 (y)."""
        if axis == 1:
            self.hist.axes[0].label = title
        elif axis == 2:
            if self.ndim == 2:
                self.hist.axes[1].label = title
            else:
                self.y_title = title
        else:
            raise HistogramError(f"{self.path}: invalid axis {axis}")

    def axis_title(self, axis: int = 1) -> str:
        if axis == 1:
            return self.hist.axes[0].label
        if self.ndim == 2:
            return self.hist.axes[1].label
        return self.y_title

    def values(self, flow: bool = False) -> np.ndarray:
        return self.hist.values(flow=flow)

    def __repr__(self) -> str:
        return f"MonitorElement({self.path!r}, kind={self.kind}, entries={self._entries})"


class HistogramPair:
    """Numerator and denominator histograms sharing the same axes."""

    def __init__(self, numerator: Optional[MonitorElement] = None,
                 denominator: Optional[MonitorElement] = None) -> None:
        self.numerator = numerator
        self.denominator = denominator

    def set_titles(self, title_x: str, title_y: str) -> None:
        for me in (self.numerator, self.denominator):
            me.set_axis_title(title_x, 1)
            me.set_axis_title(title_y, 2)

    @property
    def booked(self) -> bool:
        return self.numerator is not None and self.denominator is not None


class HistogramBooker:
    """Books histograms into a store under the current folder."""

    def __init__(self, store: "HistogramStore") -> None:
        self.store = store
        self.current_folder = ""

    def set_current_folder(self, folder: str) -> None:
        self.current_folder = folder.strip("/")

    def _register(self, name: str, title: str, kind: str, histogram: hist.Hist,
                  y_range: Optional[Tuple[float, float]] = None) -> MonitorElement:
        path = f"{self.current_folder}/{name}" if self.current_folder else name
        me = MonitorElement(path, name, title, kind, histogram, y_range)
        self.store.add(me)
        return me

    def book1d(self, name: str, title: str, nbins: int, xmin: float, xmax: float) -> MonitorElement:
        h = hist.Hist(hist.axis.Regular(nbins, xmin, xmax, name="x"), name=name, label=title)
        return self._register(name, title, "TH1F", h)

    def book1d_variable(self, name: str, title: str, edges: Sequence[float]) -> MonitorElement:
        h = hist.Hist(hist.axis.Variable(float_edges(edges, name), name="x"), name=name, label=title)
        return self._register(name, title, "TH1F", h)

    def book2d(self, name: str, title: str, nbinsx: int, xmin: float, xmax: float,
               nbinsy: int, ymin: float, ymax: float) -> MonitorElement:
        h = hist.Hist(
            hist.axis.Regular(nbinsx, xmin, xmax, name="x"),
            hist.axis.Regular(nbinsy, ymin, ymax, name="y"),
            name=name, label=title,
        )
        return self._register(name, title, "TH2F", h)

    def book2d_variable(self, name: str, title: str, edges_x: Sequence[float],
                        edges_y: Sequence[float]) -> MonitorElement:
        h = hist.Hist(
            hist.axis.Variable(float_edges(edges_x, f"{name} (x)"), name="x"),
            hist.axis.Variable(float_edges(edges_y, f"{name} (y)"), name="y"),
            name=name, label=title,
        )
        return self._register(name, title, "TH2F", h)

    def book_profile(self, name: str, title: str, nbinsx: int, xmin: float, xmax: float,
                     ymin: float, ymax: float) -> MonitorElement:
        h = hist.Hist(hist.axis.Regular(nbinsx, xmin, xmax, name="x"),
                      storage=hist.storage.Mean(), name=name, label=title)
        return self._register(name, title, "TProfile", h, y_range=(ymin, ymax))


class HistogramStore:
    """Owns every booked histogram, keyed by its full path."""

    def __init__(self) -> None:
        self.logger = logging.getLogger("RazorMonitor.HistogramStore")
        self._elements: Dict[str, MonitorElement] = {}

    def booker(self) -> HistogramBooker:
        return HistogramBooker(self)

    def add(self, me: MonitorElement) -> None:
        if me.path in self._elements:
            raise HistogramError(f"Histogram already booked: {me.path}")
        self._elements[me.path] = me
        self.logger.debug(f"Booked {me.kind} {me.path}")

    def get(self, path: str) -> MonitorElement:
        try:
            return self._elements[path]
        except KeyError:
            raise HistogramError(f"No histogram booked at {path}") from None

    def __contains__(self, path: str) -> bool:
        return path in self._elements

    def __iter__(self) -> Iterator[str]:
        return iter(self._elements)

    def __len__(self) -> int:
        return len(self._elements)

    def items(self):
        return self._elements.items()

    def save(self, output_path: str) -> Path:
        """
        Write all histograms into a ROOT file, one directory per folder

        Profiles are not written; uproot has no TProfile writer for Mean storage.
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        n_written = 0
        with uproot.recreate(output_path) as f:
            for path, me in self._elements.items():
                if me.kind == "TProfile":
                    self.logger.warning(f"Skipping profile {path}: not supported by the ROOT writer")
                    continue
                f[path] = me.hist
                n_written += 1

        self.logger.info(f"Wrote {n_written} histograms to {output_path}")
        return output_path
