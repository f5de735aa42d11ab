"""Physics/math helpers for two-prong candidate kinematics."""

from __future__ import annotations
__author__ = "hfselect developers"


import math
from typing import Iterable, Sequence

from .models import LorentzVector, Vector3

MASS_D0 = 1.86484


def energy(p: float, mass: float) -> float:
    """Energy from momentum magnitude and mass."""
    return math.sqrt(p * p + mass * mass)


def momentum_to_lorentz(momentum: Vector3, mass: float) -> LorentzVector:
    """Convert a 3-momentum plus mass hypothesis into a Lorentz 4-vector."""
    px, py, pz = momentum
    return LorentzVector(px=px, py=py, pz=pz, e=energy(norm3(momentum), mass))


def sum_lorentz(vectors: Iterable[LorentzVector]) -> LorentzVector:
    """Sum an iterable of Lorentz vectors."""
    total = LorentzVector(0.0, 0.0, 0.0, 0.0)
    for vec in vectors:
        total = total + vec
    return total


def invariant_mass(momenta: Sequence[Vector3], masses: Sequence[float]) -> float:
    """Invariant mass of the prongs under the given mass assignment."""
    if len(momenta) != len(masses):
        raise ValueError("Mass list length must match prong multiplicity.")
    return sum_lorentz(
        momentum_to_lorentz(mom, mass) for mom, mass in zip(momenta, masses, strict=True)
    ).mass


def cos_theta_star(
    momenta: Sequence[Vector3],
    masses: Sequence[float],
    mother_mass: float,
    prong_index: int,
) -> float:
    """Cosine of the decay angle of one prong in the mother rest frame.

    The mother is given the nominal `mother_mass`; the prong momentum in the
    rest frame is the two-body breakup momentum
    `p* = sqrt((M^2 - m1^2 - m2^2)^2 - 4 m1^2 m2^2) / 2M`.
    The longitudinal prong momentum is boosted back with
    `cos(theta*) = (p_L / gamma - beta * E*) / p*`.
    """
    if len(momenta) != 2 or len(masses) != 2:
        raise ValueError("cos(theta*) is defined for two-prong candidates only.")
    m0, m1 = masses
    p_mother = (
        momenta[0][0] + momenta[1][0],
        momenta[0][1] + momenta[1][1],
        momenta[0][2] + momenta[1][2],
    )
    p_tot = norm3(p_mother)
    e_tot = energy(p_tot, mother_mass)
    gamma = e_tot / mother_mass
    beta = p_tot / e_tot
    m2 = mother_mass * mother_mass
    p_star = math.sqrt((m2 - m0 * m0 - m1 * m1) ** 2 - (2.0 * m0 * m1) ** 2) / (2.0 * mother_mass)
    e_star = energy(p_star, masses[prong_index])
    if p_tot == 0.0:
        # Mother at rest: no boost axis.
        return 0.0
    p_long = dot3(momenta[prong_index], p_mother) / p_tot
    return (p_long / gamma - beta * e_star) / p_star


def dot3(a: Vector3, b: Vector3) -> float:
    """3D dot product."""
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def norm3(a: Vector3) -> float:
    """Euclidean norm of a 3D vector."""
    return math.sqrt(dot3(a, a))
