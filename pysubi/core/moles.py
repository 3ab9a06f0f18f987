"""
Formula-consistent mole counts of a SUBI phase.
"""
from collections import namedtuple
import numpy as np
from pysubi.core.phase_rec import CATION_ANION, CATION_VACANCY, NEUTRAL

MoleCounts = namedtuple('MoleCounts', ['mole_fractions', 'moles_of_atoms', 'dmol', 'dmol_derivatives'])


def vacancy_fraction(record, anion_fractions):
    "Site fraction of the vacancy, zero when the phase has none."
    if record.vacancy_index is None:
        return 0.0
    return float(anion_fractions[record.vacancy_index])


def mole_counts(record, sites):
    """
    Mole fractions consistent with the site fractions, moles of atoms per
    formula unit, the number of formula units dMol = P + Q (1 - y_Va) and
    the derivative of 1/dMol with respect to the moles of each species.

    Parameters
    ----------
    record : PhaseRecord
    sites : SiteFractions

    Returns
    -------
    MoleCounts
    """
    y1, y2 = sites.cation, sites.anion
    P, Q = sites.P, sites.Q
    yva = vacancy_fraction(record, y2)
    kinds = record.species_kinds
    cation_idx = np.maximum(record.species_cation, 0)
    anion_idx = record.species_anion

    # anion_weights holds q_c for cation/anion species
    x = np.where(kinds == CATION_ANION, y1[cation_idx] / record.anion_weights * y2[anion_idx], 0.0)
    x = np.where(kinds == CATION_VACANCY, y1[cation_idx] * yva, x)
    x = np.where(kinds == NEUTRAL, y2[anion_idx], x)
    x = x / x.sum()
    moles_of_atoms = float(np.dot(x, record.species_atoms))

    dmol = P + Q * (1.0 - yva)
    sub1, sub2 = sites.cation_total, sites.anion_total
    anion_charge = float(np.dot(-record.anion_charges, y2))
    denominator = sub1 * sub2 * dmol**2
    cation_charge = record.anion_weights
    partner_charge = record.cation_weights
    derivatives = np.empty(record.num_species)
    derivatives[:] = (-(sub1 + sub2) * cation_charge * partner_charge + sub2 * partner_charge * Q +
                      sub1 * cation_charge * anion_charge)
    vacancy_species = kinds == CATION_VACANCY
    charges = record.cation_charges[cation_idx]
    derivatives[vacancy_species] = (sub2 * (Q - charges) + sub1 * anion_charge)[vacancy_species]
    derivatives[kinds == NEUTRAL] = sub1 * anion_charge
    derivatives /= denominator
    return MoleCounts(x, moles_of_atoms, dmol, derivatives)
