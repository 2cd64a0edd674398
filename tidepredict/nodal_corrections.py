"""
Nodal corrections for the 18.6 year regression of the lunar node.

Each tabulated constituent has a short series in N (Schureman, Special
Publication 98) giving the amplitude factor f and the phase correction u in
degrees. Constituents without an entry get f = 1, u = 0.
"""

from typing import Callable, Dict, Tuple

import numpy as np

d2r: float = np.pi / 180.0

NodalFactor = Tuple[float, float]


def _series(
    f_coefs: Tuple[float, ...], u_coefs: Tuple[float, ...]
) -> Callable[[float], NodalFactor]:
    """f = f0 + sum f_k cos(kN), u = sum u_k sin(kN), k = 1..3"""

    def fu(N: float) -> NodalFactor:
        k = np.arange(1, 4)
        f = f_coefs[0] + float(np.dot(f_coefs[1:], np.cos(k * N * d2r)))
        u = float(np.dot(u_coefs, np.sin(k * N * d2r)))
        return f, u

    return fu


_O1 = _series((1.0089, 0.1871, -0.0147, 0.0006), (-8.86, 0.68, -0.07))
_K1 = _series((1.0060, 0.1150, -0.0088, 0.0016), (-12.94, 1.34, -0.19))
_M2 = _series((1.0004, -0.0373, 0.0002, 0.0), (-2.14, 0.0, 0.0))
_K2 = _series((1.0241, 0.2863, 0.0083, -0.0015), (-17.74, 0.68, -0.04))
_Mf = _series((1.0429, 0.4135, -0.0040, 0.0), (-23.74, 2.68, -0.38))
_Mm = _series((1.0000, -0.1300, 0.0013, 0.0), (0.0, 0.0, 0.0))


def _power(
    fu: Callable[[float], NodalFactor], n: int
) -> Callable[[float], NodalFactor]:
    """Compound overtides of a single parent: f ** n, n * u"""

    def compound(N: float) -> NodalFactor:
        f, u = fu(N)
        return f ** n, n * u

    return compound


_table: Dict[str, Callable[[float], NodalFactor]] = {
    "O1": _O1,
    "Q1": _O1,
    "RHO1": _O1,
    "K1": _K1,
    "M2": _M2,
    "N2": _M2,
    "2N2": _M2,
    "MU2": _M2,
    "NU2": _M2,
    "LAM2": _M2,
    "MS4": _M2,
    "K2": _K2,
    "MF": _Mf,
    "MM": _Mm,
    "M4": _power(_M2, 2),
    "MN4": _power(_M2, 2),
    "M6": _power(_M2, 3),
}


def supported() -> Tuple[str, ...]:
    """Constituent ids with a nodal correction."""
    return tuple(sorted(_table))


def nodal_factor(constituent_id: str, N: float) -> NodalFactor:
    """
    Return (f, u) for a constituent.
    Arguments:
    constituent_id -- constituent name, matched case-insensitively
    N -- longitude of the moon's ascending node (degrees)
    """
    fu = _table.get(constituent_id.upper())
    if fu is None:
        return 1.0, 0.0
    return fu(N)
