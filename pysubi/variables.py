#pylint: disable=C0103,R0903
"""
Symbols of the SUBI model: species with their sublattice roles, site
fractions, temperature and the gas constant.
"""

from symengine import Float, Symbol
from pysubi.io.grammar import parse_chemical_formula


class Species(object):
    """
    A charged or neutral constituent of a SUBI phase.

    Attributes
    ----------
    name : string
        Upper-case name, e.g. 'CA+2', 'CL-', 'SIO2' or 'VA'.
    constituents : dict
        Dictionary of {element: quantity}.
    charge : int
        Positive for cations, negative for anions.
    """
    def __new__(cls, name, constituents=None, charge=0):
        if isinstance(name, cls):
            return name
        new_self = object.__new__(cls)
        if name is None:
            name, constituents = '', {}
        elif constituents is None:
            constituents, charge = parse_chemical_formula(name)
            constituents = dict(constituents)
        new_self.name = name.upper()
        new_self.constituents = constituents
        new_self.charge = charge
        return new_self

    def __getnewargs__(self):
        return self.name, self.constituents, self.charge

    @property
    def is_vacancy(self):
        return self.name == 'VA'

    @property
    def is_cation(self):
        "Cations occupy sublattice 0."
        return self.charge > 0

    @property
    def is_anion(self):
        return self.charge < 0

    @property
    def is_neutral(self):
        "Uncharged species other than the vacancy. Neutrals occupy sublattice 1."
        return self.charge == 0 and not self.is_vacancy

    @property
    def number_of_atoms(self):
        "Atoms per formula unit; the vacancy has none."
        return sum(qty for el, qty in self.constituents.items() if el != 'VA')

    @property
    def escaped_name(self):
        "Name usable inside a symbol name."
        return self.name.replace('+', '_POS').replace('-', '_NEG').replace('/', 'Z')

    def __eq__(self, other):
        if not isinstance(other, Species):
            return False
        return self.name == other.name and self.constituents == other.constituents

    def __ne__(self, other):
        return not self.__eq__(other)

    def __lt__(self, other):
        return self.name < other.name

    def __hash__(self):
        return hash(self.name)

    def __str__(self):
        return self.name

    def __repr__(self):
        if self.name == '':
            return 'None'
        formula = ''.join('{}{}'.format(el, qty) for el, qty in sorted(self.constituents.items()))
        if self.charge == 0:
            return "Species('{}', '{}')".format(self.name, formula)
        return "Species('{}', '{}', charge={})".format(self.name, formula, self.charge)


class StateVariable(Symbol):
    """
    Symbols that stay free in a model after database symbols are replaced.
    """
    def __init__(self, name):
        super().__init__(name.upper())

    def __reduce__(self):
        return self.__class__, (self.name,)

    def __eq__(self, other):
        return isinstance(other, self.__class__) and self.name == other.name

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash((self.__class__, self.name))


class SiteFraction(StateVariable):
    """
    Fraction of a sublattice occupied by one constituent. Sublattice 0
    holds the cations, sublattice 1 the anions, the vacancy and neutrals.
    """
    def __init__(self, phase_name, subl_index, species): #pylint: disable=W0221
        species = Species(species)
        super().__init__('{}{}{}'.format(phase_name, subl_index, species.escaped_name))
        self.phase_name = phase_name.upper()
        self.sublattice_index = subl_index
        self.species = species

    def __reduce__(self):
        return self.__class__, (self.phase_name, self.sublattice_index, self.species)

    def __hash__(self):
        return hash((self.phase_name, self.sublattice_index, self.species))

    def __str__(self):
        return 'Y({},{},{})'.format(self.phase_name, self.sublattice_index, self.species.escaped_name)


class TemperatureType(StateVariable):
    def __init__(self):
        super().__init__('T')

    def __reduce__(self):
        return self.__class__, ()


T = TemperatureType()
Y = SiteFraction
R = Float(8.3145)
VACANCY = Species('VA')
