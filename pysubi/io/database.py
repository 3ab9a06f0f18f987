"""
The database module provides support for storing the structured
thermodynamic data a SUBI phase is built from.
"""
from tinydb import TinyDB, where
from tinydb.storages import MemoryStorage
from pysubi.variables import Species
from pysubi.log import logger


def _recursive_tuplify(x):
    "Recursively convert a nested list to a tuple"
    def _tuplify(y):
        if isinstance(y, list) or isinstance(y, tuple):
            return tuple(_tuplify(i) if isinstance(i, (list, tuple)) else i for i in y)
        else:
            return y
    return tuple(map(_tuplify, x))


def link_reciprocal_coefficients(coefficients):
    """
    Attach a positional series of reciprocal (Ci,Cj:Ak,Dl) coefficients to
    explicit polynomial orders.

    In the series c_1, c_2, ..., c_m the coefficient of (y_Ci - y_Cj)**n
    sits at position 2n+1 and the coefficient of (y_Ak - y_Dl)**n at
    position 2n (n >= 1). Positions past the end of the series are absent.

    Parameters
    ----------
    coefficients : list
        Coefficient series, in the order the assessment lists them.

    Returns
    -------
    list
        Tuples of (order, cation_coefficient, anion_coefficient); missing
        coefficients are None.

    Examples
    --------
    >>> link_reciprocal_coefficients([-1000, 200, 300])
    [(0, -1000, None), (1, 300, 200)]
    """
    num_coefficients = len(coefficients)
    linked = []
    for order in range(num_coefficients // 2 + 1):
        cation_position = 2 * order + 1
        anion_position = 2 * order
        cation_coef = coefficients[cation_position - 1] if cation_position <= num_coefficients else None
        anion_coef = None
        if order >= 1 and anion_position <= num_coefficients:
            anion_coef = coefficients[anion_position - 1]
        if cation_coef is None and anion_coef is None:
            continue
        linked.append((order, cation_coef, anion_coef))
    return linked


class Phase(object): #pylint: disable=R0903
    """
    Phase in the database.

    Attributes
    ----------
    name : string
        System-local name of the phase.
    constituents : tuple of frozenset
        Possible sublattice constituents (elements and/or species).
    sublattices : list
        Site ratios of sublattices.
    model_hints : dict
        Structured "hints" for a Model trying to read this phase.
        ``{'subi': True}`` selects the two-sublattice ionic liquid model.
    """
    def __init__(self):
        self.name = None
        self.constituents = None
        self.sublattices = []
        self.model_hints = {}
    def __eq__(self, other):
        if type(self) == type(other):
            return self.__dict__ == other.__dict__
        else:
            return False
    def __ne__(self, other):
        return not self.__eq__(other)
    def __repr__(self):
        return 'Phase({0!r})'.format(self.__dict__)
    def __hash__(self):
        return hash((self.name, self.constituents, tuple(self.sublattices),
                     tuple(sorted(_recursive_tuplify(self.model_hints.items())))))


class Database(object): #pylint: disable=R0902
    """
    Structured thermodynamic data.

    A Database is the output of a database loader: the species and their
    charges, the phases with their sublattice constituents, and a table of
    parameters (endmember Gibbs energies and interaction parameters).

    Attributes
    ----------
    elements : set
        Set of elements in database.
    species : set
        Set of species in database.
    phases : dict
        Phase objects indexed by their system-local name.
    symbols : dict
        SymEngine objects indexed by their name (FUNCTIONs in Thermo-Calc).

    Examples
    --------
    >>> dbf = Database()
    >>> dbf.add_species('K+')
    >>> dbf.add_species('CL-')
    >>> dbf.add_phase('IONIC_LIQ', {'subi': True}, [1, 1])
    >>> dbf.add_phase_constituents('IONIC_LIQ', [['K+'], ['CL-']])
    """
    def __init__(self):
        self.elements = set()
        self.species = set()
        self.phases = {}
        self._parameters = TinyDB(storage=MemoryStorage)
        self._parameter_queue = []
        self.symbols = {}

    def __getstate__(self):
        pickle_dict = {}
        for key, value in self.__dict__.items():
            if key == '_parameters':
                pickle_dict[key] = value.all()
            else:
                pickle_dict[key] = value
        return pickle_dict

    def __setstate__(self, state):
        for key, value in state.items():
            if key == '_parameters':
                self._parameters = TinyDB(storage=MemoryStorage)
                self._parameters.insert_multiple(value)
            else:
                setattr(self, key, value)

    def __deepcopy__(self, memo):
        copy = type(self)()
        memo[id(self)] = copy
        for key, value in self.__dict__.items():
            if key == '_parameters':
                copy._parameters = TinyDB(storage=MemoryStorage)
                copy._parameters.insert_multiple(value.all())
            else:
                setattr(copy, key, value)
        return copy

    def __str__(self):
        result = 'Elements: {0}\n'.format(sorted(self.elements))
        result += 'Species: {0}\n'.format(sorted(self.species, key=lambda s: s.name))
        for name, phase in sorted(self.phases.items()):
            result += str(phase)+'\n'
        result += '{0} symbols in database\n'.format(len(self.symbols))
        result += '{0} parameters in database\n'.format(len(self._parameters))
        return result

    def __eq__(self, other):
        if self is other:
            return True
        elif type(self) != type(other):
            return False
        elif sorted(self.__dict__.keys()) != sorted(other.__dict__.keys()):
            return False
        else:
            def param_sort_key(x):
                return x['phase_name'], x['parameter_type'], x['constituent_array'], \
                       x['parameter_order']
            for key in self.__dict__.keys():
                if key == '_parameters':
                    # Special handling for TinyDB objects
                    if len(self._parameters.all()) != len(other._parameters.all()):
                        return False
                    self_params = sorted(self._parameters.all(), key=param_sort_key)
                    other_params = sorted(other._parameters.all(), key=param_sort_key)
                    if self_params != other_params:
                        return False
                elif self.__dict__[key] != other.__dict__[key]:
                    return False
            return True

    def __ne__(self, other):
        return not self.__eq__(other)

    def add_species(self, name, constituents=None, charge=0):
        """
        Add a species, and its elements, to the database.

        Parameters
        ----------
        name : str or Species
            Species formula, e.g. 'CA+2', or a Species object.
        constituents : dict, optional
            Explicit {element: amount}; parsed from the name if omitted.
        charge : int, optional
            Charge, used only when `constituents` is given.
        """
        spec = Species(name, constituents=constituents, charge=charge)
        self.species.add(spec)
        self.elements |= {el for el in spec.constituents.keys()}

    def add_parameter(
        self, param_type, phase_name, constituent_array, param_order, param, ref=None,
        force_insert=True, **kwargs,
        ):
        """
        Add a parameter.

        Parameters
        ----------
        param_type : str
            Type name of the parameter, e.g., G, L.
        phase_name : str
            Name of the phase.
        constituent_array : list
            Configuration of the sublattices (elements and/or species).
            Interaction parameters keep the order given here; it assigns the
            constituents to their roles in the mixing term. The vacancy and
            the neutral of a Ci:Va,Bj or Ci,Cj:Va,Bk parameter are assigned
            by kind and may be given in either order.
        param_order : int
            Polynomial order of the parameter. For Ci,Cj:Va,Bk parameters
            this is the role selector.
        param : object
            Abstract representation of the parameter, e.g., in SymEngine format.
        ref : str, optional
            Reference for the parameter.
        force_insert : bool, optional
            If True, inserts into the database immediately. False is a delayed insert (for performance).
        kwargs : Any
            Additional metadata to insert into the parameter dictionary,
            e.g. ``shape`` (interaction shape code) or ``anion_parameter``.

        Examples
        --------
        >>> dbf.add_parameter('L', 'IONIC_LIQ', [['K+', 'NA+'], ['CL-']], 0, -2000.0)
        """
        species_dict = {s.name: s for s in self.species}
        new_parameter = {
            'phase_name': phase_name.upper(),
            'constituent_array': tuple(tuple(species_dict.get(str(s).upper(), Species(s)) for s in xs) for xs in constituent_array),  # must be hashable type
            'parameter_type': param_type,
            'parameter_order': param_order,
            'parameter': param,
            'reference': ref
        }
        if 'shape' in kwargs and kwargs['shape'] is not None:
            kwargs['shape'] = tuple(kwargs['shape'])
        new_parameter.update(kwargs)
        if force_insert:
            self._parameters.insert(new_parameter)
        else:
            self._parameter_queue.append(new_parameter)

    def add_reciprocal_parameters(self, phase_name, constituent_array, coefficients, ref=None):
        """
        Add a reciprocal Ci,Cj:Ak,Dl interaction given as a positional
        coefficient series.

        Each polynomial order becomes one parameter carrying its explicit
        coefficient pair, see `link_reciprocal_coefficients`.

        Parameters
        ----------
        phase_name : str
            Name of the phase.
        constituent_array : list
            [[Ci, Cj], [Ak, Dl]]
        coefficients : list
            Coefficient series.
        ref : str, optional
            Reference for the parameters.
        """
        for order, cation_coef, anion_coef in link_reciprocal_coefficients(coefficients):
            self.add_parameter('L', phase_name, constituent_array, order, cation_coef, ref=ref,
                               anion_parameter=anion_coef, shape=(2, 2, 2, 4, 2, 0))

    def add_phase(self, phase_name, model_hints, sublattices):
        """
        Add a phase.

        Parameters
        ----------
        phase_name : string
            System-local name of the phase.
        model_hints : dict
            Structured "hints" for a Model trying to read this phase.
        sublattices : list
            Site ratios of sublattices.
        """
        new_phase = Phase()
        new_phase.name = phase_name.upper()
        new_phase.sublattices = tuple(sublattices)
        new_phase.model_hints = model_hints
        self.phases[new_phase.name] = new_phase

    def add_phase_constituents(self, phase_name, constituents):
        """
        Add the sublattice constituents of a phase.

        Parameters
        ----------
        phase_name : string
            System-local name of the phase.
        constituents : list
            Possible phase constituents (elements and/or species).
        """
        species_dict = {s.name: s for s in self.species}
        try:
            self.phases[phase_name.upper()].constituents = \
                tuple([frozenset([species_dict[str(s).upper()] for s in xs]) for xs in constituents])
        except KeyError:
            logger.error('Undefined phase or species in constituents of %s', phase_name)
            raise

    def search(self, query):
        """
        Search for parameters matching the specified query.

        Parameters
        ----------
        query : object
            Structured database query in TinyDB format.

        Examples
        --------
        >>> from tinydb import where
        >>> dbf.search(where('parameter_type') == 'L')
        """
        return self._parameters.search(query)

    def phase_parameters(self, phase_name, param_type):
        "Parameters of one type for a phase, in insertion order."
        return self.search((where('phase_name') == phase_name.upper()) &
                           (where('parameter_type') == param_type))

    def process_parameter_queue(self):
        """
        Process the queue of parameters so they are added to the TinyDB in one transaction.
        This avoids repeated (expensive) calls to insert().
        """
        result = self._parameters.insert_multiple(self._parameter_queue)
        self._parameter_queue = []
        return result
