"""
The energy module evaluates the reduced Gibbs energy of a SUBI phase, and
its derivatives with respect to the site fractions of both sublattices.

Site fractions are treated as independent variables: P and Q are
functions of them, so their derivatives appear in every contribution
they scale.
"""
import numpy as np
from scipy.special import xlogy
from pysubi.core.constants import MIN_SITE_FRACTION
from pysubi.core.excess import excess_energy, excess_gradient
from pysubi.core.moles import vacancy_fraction
from pysubi.core.phase_rec import CATION_ANION, NEUTRAL
from pysubi.core.site_fractions import charge_balance


def _species_fractions(record, cation_fractions, anion_fractions):
    "Site fractions of the cation and of the sublattice 1 constituent of each species (1 for neutrals)."
    y_cation = np.where(record.species_cation >= 0,
                        cation_fractions[np.maximum(record.species_cation, 0)], 1.0)
    return y_cation, anion_fractions[record.species_anion]


def reference_energy(record, cation_fractions, anion_fractions, Q):
    """
    Weighted sum of the standard energies of the species.

    Weights are Q y_c y_Va for cation/vacancy species, Q y_B for neutrals
    and y_c y_a for cation/anion species.
    """
    y_cation, y_anion = _species_fractions(record, cation_fractions, anion_fractions)
    weights = y_cation * y_anion
    weights = np.where(record.species_kinds == CATION_ANION, weights, Q * weights)
    return float(np.dot(weights, record.species_gibbs))


def reference_gradient(record, cation_fractions, anion_fractions, Q):
    y_cation, y_anion = _species_fractions(record, cation_fractions, anion_fractions)
    gibbs = record.species_gibbs
    kinds = record.species_kinds
    d_cation = np.zeros(len(record.cations))
    d_anion = np.zeros(len(record.anions))
    has_cation = kinds != NEUTRAL
    scale = np.where(kinds == CATION_ANION, 1.0, Q)
    np.add.at(d_cation, record.species_cation[has_cation], (scale * y_anion * gibbs)[has_cation])
    np.add.at(d_anion, record.species_anion, scale * y_cation * gibbs)
    # dQ/dy_c = q_c
    q_weighted = kinds != CATION_ANION
    d_cation += record.cation_charges * float((y_cation * y_anion * gibbs)[q_weighted].sum())
    return d_cation, d_anion


def ideal_energy(record, cation_fractions, anion_fractions, P, Q):
    "P sum(y ln y) over sublattice 0 plus Q sum(y ln y) over sublattice 1 (reduced)."
    return float(P * xlogy(cation_fractions, cation_fractions).sum() +
                 Q * xlogy(anion_fractions, anion_fractions).sum())


def ideal_gradient(record, cation_fractions, anion_fractions, P, Q):
    cation_entropy = xlogy(cation_fractions, cation_fractions).sum()
    anion_entropy = xlogy(anion_fractions, anion_fractions).sum()
    yva = vacancy_fraction(record, anion_fractions)
    log_cation = np.log(np.maximum(cation_fractions, MIN_SITE_FRACTION))
    log_anion = np.log(np.maximum(anion_fractions, MIN_SITE_FRACTION))
    charges = record.cation_charges
    d_cation = P * (1 + log_cation) + charges * yva * cation_entropy + charges * anion_entropy
    dP = -record.anion_charges.copy()
    if record.vacancy_index is not None:
        dP[record.vacancy_index] = Q
    d_anion = Q * (1 + log_anion) + dP * cation_entropy
    return d_cation, d_anion


def gibbs_energy(record, cation_fractions, anion_fractions):
    "Reduced Gibbs energy per formula unit at the given site fractions."
    cation_fractions = np.asarray(cation_fractions, dtype=float)
    anion_fractions = np.asarray(anion_fractions, dtype=float)
    P, Q = charge_balance(record, cation_fractions, anion_fractions)
    return reference_energy(record, cation_fractions, anion_fractions, Q) + \
        ideal_energy(record, cation_fractions, anion_fractions, P, Q) + \
        excess_energy(record, cation_fractions, anion_fractions, Q)


def gibbs_energy_gradient(record, cation_fractions, anion_fractions):
    """
    Derivatives of the reduced Gibbs energy with respect to every site
    fraction.

    Parameters
    ----------
    record : PhaseRecord
    cation_fractions : array_like
        Site fractions of sublattice 0.
    anion_fractions : array_like
        Site fractions of sublattice 1.

    Returns
    -------
    tuple of ndarray
        Derivatives for sublattice 0 and sublattice 1.
    """
    cation_fractions = np.asarray(cation_fractions, dtype=float)
    anion_fractions = np.asarray(anion_fractions, dtype=float)
    P, Q = charge_balance(record, cation_fractions, anion_fractions)
    parts = (reference_gradient(record, cation_fractions, anion_fractions, Q),
             ideal_gradient(record, cation_fractions, anion_fractions, P, Q),
             excess_gradient(record, cation_fractions, anion_fractions, Q))
    return sum(p[0] for p in parts), sum(p[1] for p in parts)
