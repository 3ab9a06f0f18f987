"""
The phase_rec module defines PhaseRecord, the numeric and immutable form of
a SUBI phase at one temperature.
"""
from dataclasses import dataclass, field
from typing import Optional, Tuple
import numpy as np

# Species kinds
CATION_ANION = 0
CATION_VACANCY = 1
NEUTRAL = 2


def _readonly(values, dtype):
    arr = np.array(values, dtype=dtype)
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True, eq=False)
class PhaseRecord:
    """
    Numeric description of a SUBI phase, built by ModelSUBI.phase_record().

    Sublattice 0 holds the cations. Sublattice 1 holds the anions, then the
    vacancy, then the neutral species. Each phase species is either a pair
    of one cation with one anion (or the vacancy), or a lone neutral.

    All energies are reduced, i.e. divided by RT. Arrays are read-only, so
    one record can be shared by concurrent evaluations.

    Attributes
    ----------
    phase_name : str
    temperature : float
    cations : tuple of str
        Names of the sublattice 0 constituents.
    cation_charges : ndarray
    anions : tuple of str
        Names of the sublattice 1 constituents.
    anion_charges : ndarray
        Negative for anions, zero for the vacancy and neutrals.
    vacancy_index : int or None
        Index of the vacancy on sublattice 1.
    species_names : tuple of str
    species_cation : ndarray
        Cation index of each species, -1 for neutrals.
    species_anion : ndarray
        Sublattice 1 index of each species.
    species_gibbs : ndarray
        Reduced standard Gibbs energy of each species.
    mixing_terms : tuple
        Classified interaction parameters with reduced coefficients.
    """
    phase_name: str
    temperature: float
    cations: Tuple[str, ...]
    cation_charges: np.ndarray
    anions: Tuple[str, ...]
    anion_charges: np.ndarray
    vacancy_index: Optional[int]
    species_names: Tuple[str, ...]
    species_cation: np.ndarray
    species_anion: np.ndarray
    species_gibbs: np.ndarray
    mixing_terms: tuple = ()
    species_kinds: np.ndarray = field(init=False, repr=False, compare=False)
    cation_weights: np.ndarray = field(init=False, repr=False, compare=False)
    anion_weights: np.ndarray = field(init=False, repr=False, compare=False)
    species_atoms: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # frozen dataclass: normalize through object.__setattr__
        setattr_ = object.__setattr__
        setattr_(self, 'cations', tuple(self.cations))
        setattr_(self, 'anions', tuple(self.anions))
        setattr_(self, 'species_names', tuple(self.species_names))
        setattr_(self, 'mixing_terms', tuple(self.mixing_terms))
        setattr_(self, 'cation_charges', _readonly(self.cation_charges, float))
        setattr_(self, 'anion_charges', _readonly(self.anion_charges, float))
        setattr_(self, 'species_cation', _readonly(self.species_cation, int))
        setattr_(self, 'species_anion', _readonly(self.species_anion, int))
        setattr_(self, 'species_gibbs', _readonly(self.species_gibbs, float))
        num_species = len(self.species_names)
        if len(self.cation_charges) != len(self.cations) or len(self.anion_charges) != len(self.anions):
            raise ValueError('Number of charges does not match number of constituents in {}'.format(self.phase_name))
        for name, arr in (('species_cation', self.species_cation), ('species_anion', self.species_anion),
                          ('species_gibbs', self.species_gibbs)):
            if arr.shape != (num_species,):
                raise ValueError('{} of {} has shape {}, expected ({},)'.format(name, self.phase_name,
                                                                                 arr.shape, num_species))

        is_vacancy = np.zeros(num_species, dtype=bool)
        if self.vacancy_index is not None:
            is_vacancy = self.species_anion == self.vacancy_index
        is_neutral = self.species_cation < 0
        kinds = np.full(num_species, CATION_ANION, dtype=int)
        kinds[is_vacancy] = CATION_VACANCY
        kinds[is_neutral] = NEUTRAL
        cation_charge = np.where(is_neutral, 0.0, self.cation_charges[np.maximum(self.species_cation, 0)]) \
            if len(self.cations) > 0 else np.zeros(num_species)
        anion_charge = self.anion_charges[self.species_anion]
        # Occupation a species adds to each sublattice per mole
        cation_weights = np.where(kinds == CATION_ANION, -anion_charge, 1.0)
        cation_weights[is_neutral] = 0.0
        anion_weights = np.where(kinds == CATION_ANION, cation_charge, 1.0)
        atoms = np.where(kinds == CATION_ANION, cation_charge - anion_charge, 1.0)
        setattr_(self, 'species_kinds', _readonly(kinds, int))
        setattr_(self, 'cation_weights', _readonly(cation_weights, float))
        setattr_(self, 'anion_weights', _readonly(anion_weights, float))
        setattr_(self, 'species_atoms', _readonly(atoms, float))

    @property
    def num_species(self):
        return len(self.species_names)
