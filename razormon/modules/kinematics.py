"""
Razor kinematic variables

Computes M_R and R from the two hemisphere four-vectors and the event missing
transverse energy. These are the "gamma * M_R*" and M_T^R / M_R constructions
used by the razor HLT filter, kept numerically identical to it: degenerate
hemispheres return the -1 sentinel, and negative square roots or zero
denominators propagate as NaN / inf instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np

# Leading hemisphere pT at or below which M_R is undefined [GeV]
MIN_HEMISPHERE_PT = 0.1
MR_SENTINEL = -1.0


@dataclass(frozen=True)
class RazorVariables:
    """Razor variables of one event."""

    mr: float
    r: float
    rsq: float
    dphi_r: float


def _squared(*components: float) -> np.float64:
    """Sum of squared components, accumulated left to right."""
    components = [np.float64(c) for c in components]
    with np.errstate(over="ignore", invalid="ignore"):
        total = components[0] * components[0]
        for c in components[1:]:
            total = total + c * c
    return total


def _magnitude(*components: float) -> np.float64:
    with np.errstate(invalid="ignore"):
        return np.sqrt(_squared(*components))


def calc_mr(ja: Any, jb: Any) -> float:
    """
    Boost-corrected razor mass scale gamma * M_R*

    Args:
        ja: Leading hemisphere four-vector (the caller decides the ordering)
        jb: Second hemisphere four-vector

    Returns:
        M_R in GeV, -1 if the leading hemisphere has pT <= 0.1 GeV
    """
    if _magnitude(ja.px, ja.py) <= MIN_HEMISPHERE_PT:
        return MR_SENTINEL

    A = _magnitude(ja.px, ja.py, ja.pz)
    B = _magnitude(jb.px, jb.py, jb.pz)
    az = np.float64(ja.pz)
    bz = np.float64(jb.pz)
    ATBT = _squared(np.float64(ja.px) + np.float64(jb.px), np.float64(ja.py) + np.float64(jb.py))
    jaT2 = _squared(ja.px, ja.py)
    jbT2 = _squared(jb.px, jb.py)

    with np.errstate(invalid="ignore", divide="ignore", over="ignore"):
        mr_star = np.sqrt((A + B) * (A + B) - (az + bz) * (az + bz)
                          - (jbT2 - jaT2) * (jbT2 - jaT2) / ATBT)
        beta = (jbT2 - jaT2) / np.sqrt(ATBT * ((A + B) * (A + B) - (az + bz) * (az + bz)))
        gamma = 1.0 / np.sqrt(1.0 - beta * beta)

        # use gamma times MR*
        return float(mr_star * gamma)


def calc_r(mr: float, ja: Any, jb: Any, met_collection: Sequence[Any]) -> float:
    """
    Razor ratio R = M_T^R / M_R

    Only the first entry of the MET collection is used. The MET momentum is a
    three-vector with zero z, dotted with the full hemisphere three-momenta.
    The final division is done in single precision, as in the HLT filter.
    """
    met = met_collection[0].momentum()
    pt_sum = _magnitude(ja.px, ja.py) + _magnitude(jb.px, jb.py)
    met_dot = np.float64(met.dot(ja.to_Vector3D() + jb.to_Vector3D()))

    with np.errstate(invalid="ignore", divide="ignore", over="ignore"):
        mtr = np.sqrt(0.5 * (_magnitude(met.px, met.py, met.pz) * pt_sum - met_dot))
        return float(np.float32(mtr) / np.float32(mr))


def delta_phi_r(h0: Any, h1: Any) -> float:
    """Absolute azimuthal separation of two hemispheres, in [0, pi]."""
    return abs(float(h0.deltaphi(h1)))


def compute_razor_variables(hemispheres: Sequence[Any], met_collection: Sequence[Any]) -> RazorVariables:
    """
    Compute M_R, R, R^2 and dPhi_R from the two leading hemispheres

    The harder hemisphere (by pT) is passed first to the M_R and R
    calculation; dPhi_R always uses the collection order.
    """
    h0, h1 = hemispheres[0], hemispheres[1]
    if h1.pt > h0.pt:
        ja, jb = h1, h0
    else:
        ja, jb = h0, h1

    mr = calc_mr(ja, jb)
    r = calc_r(mr, ja, jb, met_collection)
    return RazorVariables(mr=mr, r=r, rsq=r * r, dphi_r=delta_phi_r(h0, h1))
