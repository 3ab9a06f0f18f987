"""
The chemical_potentials module assembles the chemical potential of every
species of a SUBI phase from its mole fractions.

The evaluation runs in five stages: site fractions and the charge-balance
numbers P and Q, formula-consistent mole counts, the excess energy of the
classified mixing terms, the site fraction derivatives of all energy
contributions, and finally the chain rule from site fractions to moles of
species.
"""
from dataclasses import dataclass
from typing import Tuple
import numpy as np
from pysubi.core.energy import reference_energy, reference_gradient, ideal_energy, ideal_gradient
from pysubi.core.excess import excess_energy, excess_gradient
from pysubi.core.moles import mole_counts
from pysubi.core.site_fractions import site_fractions
from pysubi.log import logger


@dataclass(frozen=True, eq=False)
class SUBIResult:
    """
    Chemical potentials of a SUBI phase and the intermediates they were
    computed from. Energies are reduced (divided by RT) and per formula unit.

    Attributes
    ----------
    chemical_potentials : ndarray
        One per species, in record order.
    site_fractions : tuple of ndarray
        Normalized site fractions of sublattice 0 and sublattice 1.
    P, Q : float
        Charge-balance numbers (stoichiometries of sublattices 0 and 1).
    mole_fractions : ndarray
        Formula-consistent species mole fractions.
    moles_of_atoms : float
    dmol : float
        Number of formula units, P + Q (1 - y_Va).
    dmol_derivatives : ndarray
        Derivative of 1/dmol with respect to the moles of each species.
    gibbs_energy, reference_energy, ideal_energy, excess_energy : float
    gradient : tuple of ndarray
        Derivatives of gibbs_energy with respect to the site fractions.
    """
    chemical_potentials: np.ndarray
    site_fractions: Tuple[np.ndarray, np.ndarray]
    P: float
    Q: float
    mole_fractions: np.ndarray
    moles_of_atoms: float
    dmol: float
    dmol_derivatives: np.ndarray
    gibbs_energy: float
    reference_energy: float
    ideal_energy: float
    excess_energy: float
    gradient: Tuple[np.ndarray, np.ndarray]


def subi_chemical_potentials(record, mole_fractions):
    """
    Evaluate the chemical potentials of all species of a SUBI phase.

    Parameters
    ----------
    record : PhaseRecord
        Phase at a fixed temperature, see ModelSUBI.phase_record().
    mole_fractions : array_like
        Mole fraction of each species in record order. Not modified.

    Returns
    -------
    SUBIResult

    Raises
    ------
    DegenerateSublatticeError
        A sublattice has zero occupation at these mole fractions.

    Examples
    --------
    >>> record = ModelSUBI(dbf, ['K', 'NA', 'CL'], 'IONIC_LIQ').phase_record(1100.)  # doctest: +SKIP
    >>> subi_chemical_potentials(record, [0.4, 0.6]).chemical_potentials  # doctest: +SKIP
    """
    sites = site_fractions(record, mole_fractions)
    y1, y2 = sites.cation, sites.anion
    P, Q = sites.P, sites.Q
    counts = mole_counts(record, sites)

    gref = reference_energy(record, y1, y2, Q)
    gideal = ideal_energy(record, y1, y2, P, Q)
    gexcess = excess_energy(record, y1, y2, Q)
    gibbs = gref + gideal + gexcess
    parts = (reference_gradient(record, y1, y2, Q), ideal_gradient(record, y1, y2, P, Q),
             excess_gradient(record, y1, y2, Q))
    dgdc1 = sum(p[0] for p in parts)
    dgdc2 = sum(p[1] for p in parts)

    # dy_j/dn_m = weight_m ([j = constituent of m] - y_j) / raw total
    has_cation = record.species_cation >= 0
    cation_term = np.where(has_cation, dgdc1[np.maximum(record.species_cation, 0)], 0.0) - np.dot(y1, dgdc1)
    cation_term = record.cation_weights * cation_term / sites.cation_total
    anion_term = dgdc2[record.species_anion] - np.dot(y2, dgdc2)
    anion_term = record.anion_weights * anion_term / sites.anion_total

    natom = record.species_atoms / counts.dmol + counts.dmol_derivatives * counts.moles_of_atoms
    mu = gibbs * natom + counts.moles_of_atoms / counts.dmol * (cation_term + anion_term)
    logger.debug('%s: G=%s (ref %s, ideal %s, excess %s), mu=%s', record.phase_name, gibbs, gref, gideal,
                 gexcess, mu)
    return SUBIResult(chemical_potentials=mu, site_fractions=(y1, y2), P=P, Q=Q,
                      mole_fractions=counts.mole_fractions, moles_of_atoms=counts.moles_of_atoms,
                      dmol=counts.dmol, dmol_derivatives=counts.dmol_derivatives, gibbs_energy=gibbs,
                      reference_energy=gref, ideal_energy=gideal, excess_energy=gexcess,
                      gradient=(dgdc1, dgdc2))
