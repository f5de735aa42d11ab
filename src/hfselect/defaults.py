"""Standard D0 -> pi K pT binning and per-bin topological cuts.

Units: GeV/c for momenta and masses, cm for impact parameters.
"""

from __future__ import annotations

from .bins import PtBinnedCuts

CUT_MASS = "m"
CUT_DCA = "DCA"
CUT_COS_THETA_STAR = "cos theta*"
CUT_PT_KAON = "pT K"
CUT_PT_PION = "pT Pi"
CUT_D0_KAON = "d0K"
CUT_D0_PION = "d0pi"
CUT_D0D0 = "d0d0"
CUT_CPA = "cos pointing angle"
CUT_CPA_XY = "cos pointing angle xy"
CUT_DECAY_LENGTH_XY_NORMALISED = "normalized decay length XY"

D0_CUT_LABELS: tuple[str, ...] = (
    CUT_MASS,
    CUT_DCA,
    CUT_COS_THETA_STAR,
    CUT_PT_KAON,
    CUT_PT_PION,
    CUT_D0_KAON,
    CUT_D0_PION,
    CUT_D0D0,
    CUT_CPA,
    CUT_CPA_XY,
    CUT_DECAY_LENGTH_XY_NORMALISED,
)

D0_PT_BINS: tuple[float, ...] = (
    0.0, 0.5, 1.0, 1.5, 2.0, 2.5, 3.0, 3.5, 4.0, 4.5, 5.0, 5.5, 6.0,
    6.5, 7.0, 7.5, 8.0, 9.0, 10.0, 12.0, 16.0, 20.0, 24.0, 36.0, 50.0, 100.0,
)


def _row(
    dca: float,
    cos_theta_star: float,
    pt_k: float,
    pt_pi: float,
    d0d0: float,
    cpa: float,
) -> tuple[float, ...]:
    # m, DCA, cos theta*, pT K, pT Pi, d0K, d0pi, d0d0, CPA, CPA xy, norm. decay length XY
    return (0.400, dca, cos_theta_star, pt_k, pt_pi, 0.1, 0.1, d0d0, cpa, 0.0, 0.0)


D0_CUT_VALUES: tuple[tuple[float, ...], ...] = (
    _row(0.035, 0.8, 0.5, 0.5, -5000e-8, 0.80),   # 0   < pT < 0.5
    _row(0.035, 0.8, 0.5, 0.5, -5000e-8, 0.80),   # 0.5 < pT < 1
    _row(0.030, 0.8, 0.4, 0.4, -25000e-8, 0.80),  # 1   < pT < 1.5
    _row(0.030, 0.8, 0.4, 0.4, -25000e-8, 0.80),  # 1.5 < pT < 2
    _row(0.030, 0.8, 0.7, 0.7, -20000e-8, 0.90),  # 2   < pT < 2.5
    _row(0.030, 0.8, 0.7, 0.7, -20000e-8, 0.90),  # 2.5 < pT < 3
    _row(0.030, 0.8, 0.7, 0.7, -12000e-8, 0.85),  # 3   < pT < 3.5
    _row(0.030, 0.8, 0.7, 0.7, -12000e-8, 0.85),  # 3.5 < pT < 4
    _row(0.030, 0.8, 0.7, 0.7, -8000e-8, 0.85),   # 4   < pT < 4.5
    _row(0.030, 0.8, 0.7, 0.7, -8000e-8, 0.85),   # 4.5 < pT < 5
    _row(0.030, 0.8, 0.7, 0.7, -8000e-8, 0.85),   # 5   < pT < 5.5
    _row(0.030, 0.8, 0.7, 0.7, -8000e-8, 0.85),   # 5.5 < pT < 6
    _row(0.030, 0.8, 0.7, 0.7, -8000e-8, 0.85),   # 6   < pT < 6.5
    _row(0.030, 0.8, 0.7, 0.7, -8000e-8, 0.85),   # 6.5 < pT < 7
    _row(0.030, 0.8, 0.7, 0.7, -7000e-8, 0.85),   # 7   < pT < 7.5
    _row(0.030, 0.8, 0.7, 0.7, -7000e-8, 0.85),   # 7.5 < pT < 8
    _row(0.030, 0.9, 0.7, 0.7, -5000e-8, 0.85),   # 8   < pT < 9
    _row(0.030, 0.9, 0.7, 0.7, -5000e-8, 0.85),   # 9   < pT < 10
    _row(0.030, 0.9, 0.7, 0.7, -5000e-8, 0.85),   # 10  < pT < 12
    _row(0.030, 1.0, 0.7, 0.7, 10000e-8, 0.85),   # 12  < pT < 16
    _row(0.030, 1.0, 0.7, 0.7, 999999e-8, 0.85),  # 16  < pT < 20
    _row(0.030, 1.0, 0.7, 0.7, 999999e-8, 0.85),  # 20  < pT < 24
    _row(0.030, 1.0, 0.7, 0.7, 999999e-8, 0.85),  # 24  < pT < 36
    _row(0.030, 1.0, 0.7, 0.7, 999999e-8, 0.85),  # 36  < pT < 50
    _row(0.030, 1.0, 0.6, 0.6, 999999e-8, 0.80),  # 50  < pT < 100
)


def default_d0_cuts() -> PtBinnedCuts:
    """Return the standard 25-bin D0 -> pi K cut table."""
    return PtBinnedCuts(
        pt_bins=D0_PT_BINS,
        cut_labels=D0_CUT_LABELS,
        values=D0_CUT_VALUES,
    )
