"""
Event data model consumed by the razor monitor

Four-vectors are `vector` momentum objects; the missing transverse energy is a
small wrapper carrying the transverse momentum plus auxiliary scalars.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional, Sequence

import vector


def make_hemisphere(px: float, py: float, pz: float, E: float):
    """Build a hemisphere four-vector from Cartesian components."""
    return vector.obj(px=float(px), py=float(py), pz=float(pz), E=float(E))


def make_jet(pt: float, eta: float, phi: float, mass: float = 0.0):
    """Build a jet four-vector from collider coordinates."""
    return vector.obj(pt=float(pt), eta=float(eta), phi=float(phi), mass=float(mass))


class MissingEnergy:
    """Missing transverse energy of an event.

    Attributes:
        px, py: Transverse components [GeV]
        sum_et: Scalar sum of transverse energy [GeV]
    """

    def __init__(self, px: float, py: float, sum_et: float = 0.0) -> None:
        self.px = float(px)
        self.py = float(py)
        self.sum_et = float(sum_et)

    @classmethod
    def from_polar(cls, pt: float, phi: float, sum_et: float = 0.0) -> "MissingEnergy":
        return cls(pt * math.cos(phi), pt * math.sin(phi), sum_et)

    @property
    def pt(self) -> float:
        return math.hypot(self.px, self.py)

    @property
    def phi(self) -> float:
        return math.atan2(self.py, self.px)

    def momentum(self):
        """Three-momentum with zero longitudinal component."""
        return vector.obj(px=self.px, py=self.py, pz=0.0)

    def __repr__(self) -> str:
        return f"MissingEnergy(px={self.px!r}, py={self.py!r}, sum_et={self.sum_et!r})"


class Event:
    """
    One event as delivered by the event source

    Collections are looked up by input tag. A tag that is not present models
    a collection that was not produced upstream (invalid handle).

    Attributes:
        run, lumi, event: Event identifiers
        collections: Mapping from input tag to a sequence of objects
        trigger_results: Mapping from HLT path name to decision (None if unavailable)
        dcs_status: Mapping from DCS partition id to "detector on" (None if unavailable)
    """

    def __init__(
        self,
        run: int = 1,
        lumi: int = 1,
        event: int = 1,
        collections: Optional[Mapping[str, Sequence[Any]]] = None,
        trigger_results: Optional[Mapping[str, bool]] = None,
        dcs_status: Optional[Mapping[int, bool]] = None,
    ) -> None:
        self.run = run
        self.lumi = lumi
        self.event = event
        self.collections: Dict[str, Sequence[Any]] = dict(collections or {})
        self.trigger_results = trigger_results
        self.dcs_status = dcs_status

    def get_by_tag(self, tag: str) -> Optional[Sequence[Any]]:
        """Return the collection for `tag`, or None if it was not produced."""
        return self.collections.get(tag)

    def __repr__(self) -> str:
        return f"Event(run={self.run}, lumi={self.lumi}, event={self.event})"


class Run:
    """Run-level information handed to evaluators at booking time."""

    def __init__(self, run: int = 1, hlt_menu: Optional[Sequence[str]] = None) -> None:
        self.run = run
        self.hlt_menu = list(hlt_menu) if hlt_menu is not None else None

    def __repr__(self) -> str:
        return f"Run(run={self.run})"
