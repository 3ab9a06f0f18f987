"""
Excess Gibbs energy of a SUBI phase and its site fraction derivatives.
"""
import numpy as np


class SiteFractionView(object):
    "Look up the site fraction at a SiteIndex in the per-sublattice arrays."
    def __init__(self, cation_fractions, anion_fractions):
        self._sublattices = (cation_fractions, anion_fractions)

    def __getitem__(self, site):
        return float(self._sublattices[site.sublattice][site.index])


def excess_energy(record, cation_fractions, anion_fractions, Q):
    "Sum of the energies of all mixing terms of the record (reduced)."
    y = SiteFractionView(cation_fractions, anion_fractions)
    return sum((term.energy(y, Q) for term in record.mixing_terms), 0.0)


def excess_gradient(record, cation_fractions, anion_fractions, Q):
    """
    Partial derivatives of the excess energy with respect to every site
    fraction, for sublattice 0 and sublattice 1.

    Returns
    -------
    tuple of ndarray
    """
    y = SiteFractionView(cation_fractions, anion_fractions)
    dgdc = [np.zeros(len(record.cations)), np.zeros(len(record.anions))]
    for term in record.mixing_terms:
        term.accumulate_gradient(y, Q, record.cation_charges, dgdc)
    return dgdc[0], dgdc[1]
