"""
Site fractions of a SUBI phase from the mole fractions of its species.
"""
from collections import namedtuple
import numpy as np
from pysubi.core.errors import DegenerateSublatticeError
from pysubi.log import logger

SiteFractions = namedtuple('SiteFractions', ['cation', 'anion', 'cation_total', 'anion_total', 'P', 'Q'])
SiteFractions.__doc__ = """
Normalized site fractions of both sublattices, the raw occupation totals
they were normalized by, and the charge-balance numbers P and Q.
"""


def charge_balance(record, cation_fractions, anion_fractions):
    """
    Charge-balance numbers of the phase.

    Q = sum of q_c y_c over the cations; P = sum of -q_a y_a over the anions,
    plus Q y_Va. P and Q are the stoichiometries of sublattices 0 and 1.

    Returns
    -------
    tuple
        (P, Q)
    """
    Q = float(np.dot(record.cation_charges, cation_fractions))
    P = float(np.dot(-record.anion_charges, anion_fractions))
    if record.vacancy_index is not None:
        P += Q * float(anion_fractions[record.vacancy_index])
    return P, Q


def site_fractions(record, mole_fractions):
    """
    Build the site fractions of both sublattices.

    Parameters
    ----------
    record : PhaseRecord
    mole_fractions : array_like
        Mole fraction of each phase species, in record order. Not modified.

    Returns
    -------
    SiteFractions

    Raises
    ------
    DegenerateSublatticeError
        The raw occupation of a sublattice sums to zero.
    """
    x = np.asarray(mole_fractions, dtype=float)
    if x.shape != (record.num_species,):
        raise ValueError('Expected {} species mole fractions for {}, got shape {}'.format(
            record.num_species, record.phase_name, x.shape))
    has_cation = record.species_cation >= 0
    cation_raw = np.zeros(len(record.cations))
    np.add.at(cation_raw, record.species_cation[has_cation], (x * record.cation_weights)[has_cation])
    anion_raw = np.zeros(len(record.anions))
    np.add.at(anion_raw, record.species_anion, x * record.anion_weights)
    cation_total = cation_raw.sum()
    anion_total = anion_raw.sum()
    for subl_idx, total in enumerate((cation_total, anion_total)):
        if total == 0:
            raise DegenerateSublatticeError('Sublattice {} of {} has zero occupation'.format(
                subl_idx, record.phase_name), phase_name=record.phase_name)
    cation_fractions = cation_raw / cation_total
    anion_fractions = anion_raw / anion_total
    P, Q = charge_balance(record, cation_fractions, anion_fractions)
    logger.debug('%s: site fractions %s %s, P=%s Q=%s', record.phase_name, cation_fractions,
                 anion_fractions, P, Q)
    return SiteFractions(cation_fractions, anion_fractions, cation_total, anion_total, P, Q)
