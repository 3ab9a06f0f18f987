"""
The model module provides support for using a Database to build the
symbolic and numeric forms of a SUBI (two-sublattice ionic liquid) phase.
"""
from collections import OrderedDict
from symengine import Add, S, Symbol, log
from tinydb import where
import pysubi.variables as v
from pysubi.core.errors import DofError
from pysubi.core.mixing_terms import ParameterClassifier, SiteIndex, evaluate_coefficients
from pysubi.core.phase_rec import PhaseRecord
from pysubi.core.utils import unpack_components, wrap_symbol
from pysubi.log import logger

# Maximum number of levels deep we check for symbols that are functions of
# other symbols
_MAX_PARAM_NESTING = 32


class ModelSUBI(object):
    """
    Models use an abstract representation of the function
    for calculation of values under specified conditions.

    Sublattice 0 of the phase holds cations. Sublattice 1 holds anions, the
    vacancy and neutral species, ordered in that way. The phase species are
    every pairing of an active cation with an active anion or the vacancy,
    followed by the neutrals.

    Parameters
    ----------
    dbe : Database
        Database containing the relevant parameters.
    comps : list
        Names of components to consider in the calculation. 'VA' must be
        included for the vacancy to be active.
    phase_name : str
        Name of phase model to build. Its model_hints must contain
        ``{'subi': True}``.
    parameters : dict or list, optional
        Optional dictionary of parameters to be substituted in the model.
        A list of parameters will cause those symbols to remain symbolic.

    Attributes
    ----------
    constituents : list of list of Species
        Active constituents of sublattice 0 and sublattice 1, in site
        fraction order.
    species : list of tuple
        (cation, sublattice 1 constituent) of each phase species; the
        cation is None for neutrals.
    site_fractions : list of SiteFraction
        In the order of the PhaseRecord arrays.
    endmember_energies : list
        Standard Gibbs energy of each species, symbolic in T (J/mol).
    models : OrderedDict
        Symbolic contributions, in J/mol per formula unit.

    Examples
    --------
    >>> mod = ModelSUBI(dbf, ['K', 'NA', 'CL', 'VA'], 'IONIC_LIQ')  # doctest: +SKIP
    >>> record = mod.phase_record(1100.)  # doctest: +SKIP
    """
    contributions = [('ref', 'reference_energy'), ('idmix', 'ideal_mixing_energy'),
                     ('xsmix', 'excess_mixing_energy')]

    def __init__(self, dbe, comps, phase_name, parameters=None):
        self.phase_name = phase_name.upper()
        phase = dbe.phases[self.phase_name]
        if not phase.model_hints.get('subi', False):
            raise ValueError('{} is not a SUBI phase (model_hints {})'.format(self.phase_name, phase.model_hints))
        if len(phase.constituents) != 2:
            raise ValueError('SUBI phase {} specified with {} sublattices, expected 2'.format(
                self.phase_name, len(phase.constituents)))
        active_species = unpack_components(dbe, comps)
        cations = sorted(set(phase.constituents[0]).intersection(active_species))
        second = set(phase.constituents[1]).intersection(active_species)
        for spec in cations:
            if not spec.is_cation:
                raise ValueError('{}: {} on the cation sublattice must be positively charged'.format(
                    self.phase_name, spec))
        for spec in second:
            if spec.is_cation:
                raise ValueError('{}: cation {} on the anion sublattice'.format(self.phase_name, spec))
        for idx, subl_comps in enumerate((cations, second)):
            if len(subl_comps) == 0:
                raise DofError('{0}: Sublattice {1} of {2} has no components in {3}'.format(
                    self.phase_name, idx, phase.constituents, sorted(active_species)))
        anions = sorted(s for s in second if s.is_anion)
        vacancies = [s for s in second if s.is_vacancy]
        neutrals = sorted(s for s in second if s.is_neutral)
        self.constituents = [cations, anions + vacancies + neutrals]
        self.components = sorted(set(cations) | second)
        self.species = [(cation, anion) for cation in cations for anion in anions + vacancies] + \
                       [(None, neutral) for neutral in neutrals]
        self.site_fractions = [v.SiteFraction(self.phase_name, idx, spec)
                               for idx, subl in enumerate(self.constituents) for spec in subl]

        # Convert string symbol names to Symbol objects
        # This makes xreplace work with the symbols dict
        symbols = {Symbol(s): val for s, val in dbe.symbols.items()}
        if parameters is not None:
            self._parameters_arg = parameters
            if isinstance(parameters, dict):
                symbols.update([(wrap_symbol(s), val) for s, val in parameters.items()])
            else:
                # Lists of symbols that should remain symbolic
                for s in parameters:
                    symbols.pop(wrap_symbol(s))
        else:
            self._parameters_arg = None
        self._symbols = {wrap_symbol(key): value for key, value in symbols.items()}

        self.endmember_energies = [self._endmember_parameter(dbe, cation, anion) for cation, anion in self.species]
        self._mixing_terms = self.mixing_terms(dbe)
        self.models = OrderedDict()
        self.build_phase(dbe)

    @staticmethod
    def symbol_replace(obj, symbols):
        """
        Substitute values of symbols into 'obj'.

        Parameters
        ----------
        obj : SymEngine object
        symbols : dict mapping symengine.Symbol to SymEngine object

        Returns
        -------
        SymEngine object
        """
        try:
            # Need to do more substitutions to catch symbols that are functions
            # of other symbols
            for iteration in range(_MAX_PARAM_NESTING):
                obj = obj.xreplace(symbols)
                undefs = [x for x in obj.free_symbols if not isinstance(x, v.StateVariable)]
                if len(undefs) == 0:
                    break
        except AttributeError:
            # Can't use xreplace on a float
            pass
        return obj

    def __eq__(self, other):
        if self is other:
            return True
        elif type(self) != type(other):
            return False
        else:
            return self.__dict__ == other.__dict__

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash(repr(self))

    @property
    def ast(self):
        "Return the full abstract syntax tree of the model."
        return Add(*list(self.models.values()))

    @property
    def variables(self):
        "Return state variables in the model."
        return sorted([x for x in self.ast.free_symbols if isinstance(x, v.StateVariable)], key=str)

    # Per formula unit of the phase
    energy = GM = property(lambda self: self.ast)

    @property
    def species_names(self):
        return ['{}:{}'.format(c, a) if c is not None else str(a) for c, a in self.species]

    def _site_fraction_dict(self):
        return {SiteIndex(idx, i): v.SiteFraction(self.phase_name, idx, spec)
                for idx, subl in enumerate(self.constituents) for i, spec in enumerate(subl)}

    def charge_balance(self):
        """
        Symbolic charge-balance numbers.

        Returns
        -------
        tuple
            (P, Q), the stoichiometries of sublattices 0 and 1.
        """
        Q = Add(*[spec.charge * v.SiteFraction(self.phase_name, 0, spec) for spec in self.constituents[0]])
        P = Add(*[-spec.charge * v.SiteFraction(self.phase_name, 1, spec) for spec in self.constituents[1]])
        if v.VACANCY in self.constituents[1]:
            P += Q * v.SiteFraction(self.phase_name, 1, v.VACANCY)
        return P, Q

    def build_phase(self, dbe):
        """
        Generate the symbolic form of all the contributions to this phase.

        Parameters
        ----------
        dbe : Database
        """
        self.models.clear()
        for key, value in self.__class__.contributions:
            self.models[key] = S(getattr(self, value)(dbe))

    def _array_validity(self, constituent_array):
        """
        Return True if the constituent_array contains only active species of the current Model instance.
        Neutral species may be given on their own, without a cation sublattice.
        """
        if len(constituent_array) == 1:
            return set(constituent_array[0]).issubset(self.constituents[1])
        if len(constituent_array) != len(self.constituents):
            return False
        for param_sublattice, model_sublattice in zip(constituent_array, self.constituents):
            if not set(param_sublattice).issubset(model_sublattice):
                return False
        return True

    def _endmember_parameter(self, dbe, cation, anion):
        "Standard Gibbs energy of one species, zero if the database has none."
        if cation is None:
            constituent_array = ((anion,),)
        else:
            constituent_array = ((cation,), (anion,))
        params = dbe.search((where('phase_name') == self.phase_name) &
                            (where('parameter_type') == 'G') &
                            (where('constituent_array') == constituent_array))
        if len(params) == 0:
            logger.warning('No G parameter for %s in %s; using zero', constituent_array, self.phase_name)
            return S.Zero
        return self.symbol_replace(S(params[0]['parameter']), self._symbols)

    def interaction_parameters(self, dbe):
        "Active interaction parameters of the phase, in database order."
        return [param for param in dbe.phase_parameters(self.phase_name, 'L')
                if self._array_validity(param['constituent_array'])]

    def mixing_terms(self, dbe):
        """
        Classify the interaction parameters of the phase. Coefficients are
        symbolic; see phase_record() for their values at one temperature.

        Parameters
        ----------
        dbe : Database

        Returns
        -------
        list
            Mixing term objects, see pysubi.core.mixing_terms.
        """
        def coefficient(value):
            # Reciprocal families may lack either coefficient of an order
            if value is None:
                return None
            return self.symbol_replace(S(value), self._symbols)

        classifier = ParameterClassifier(self.phase_name, self.constituents)
        return [classifier.classify(param, coefficient(param['parameter']), coefficient(param.get('anion_parameter')))
                for param in self.interaction_parameters(dbe)]

    def reference_energy(self, dbe):
        #pylint: disable=W0613
        """
        Returns the weighted sum of the species energies in symbolic form.
        """
        P, Q = self.charge_balance()
        terms = []
        for (cation, anion), gibbs in zip(self.species, self.endmember_energies):
            if cation is None:
                terms.append(Q * v.SiteFraction(self.phase_name, 1, anion) * gibbs)
                continue
            weight = v.SiteFraction(self.phase_name, 0, cation) * v.SiteFraction(self.phase_name, 1, anion)
            if anion.is_vacancy:
                weight = Q * weight
            terms.append(weight * gibbs)
        return Add(*terms)

    def ideal_mixing_energy(self, dbe):
        #pylint: disable=W0613
        """
        Returns the ideal mixing energy in symbolic form.
        """
        P, Q = self.charge_balance()
        site_ratios = (P, Q)
        ideal_mixing_term = S.Zero
        for subl_index, sublattice in enumerate(self.constituents):
            for comp in sublattice:
                sitefrac = v.SiteFraction(self.phase_name, subl_index, comp)
                ideal_mixing_term += site_ratios[subl_index] * sitefrac * log(sitefrac)
        return ideal_mixing_term * v.R * v.T

    def excess_mixing_energy(self, dbe):
        """
        Build the excess mixing energy from the classified interaction parameters.
        """
        P, Q = self.charge_balance()
        y = self._site_fraction_dict()
        return Add(*[term.energy(y, Q) for term in self._mixing_terms])

    def phase_record(self, temperature):
        """
        Numeric form of the phase at one temperature.

        Parameters
        ----------
        temperature : float
            Temperature in K.

        Returns
        -------
        PhaseRecord
            Energies reduced by RT.
        """
        temperature = float(temperature)
        rt = float(v.R) * temperature

        def evaluate(expr):
            value = S(expr).subs({v.T: temperature})
            if len(value.free_symbols) > 0:
                raise ValueError('Undefined symbols {} in parameter of {}'.format(
                    sorted(map(str, value.free_symbols)), self.phase_name))
            return float(value) / rt

        cations, anions = self.constituents
        vacancy_index = anions.index(v.VACANCY) if v.VACANCY in anions else None
        species_gibbs = [evaluate(gibbs) for gibbs in self.endmember_energies]
        record = PhaseRecord(
            phase_name=self.phase_name,
            temperature=temperature,
            cations=[str(s) for s in cations],
            cation_charges=[s.charge for s in cations],
            anions=[str(s) for s in anions],
            anion_charges=[s.charge for s in anions],
            vacancy_index=vacancy_index,
            species_names=self.species_names,
            species_cation=[cations.index(c) if c is not None else -1 for c, a in self.species],
            species_anion=[anions.index(a) for c, a in self.species],
            species_gibbs=species_gibbs,
            mixing_terms=[evaluate_coefficients(term, evaluate) for term in self._mixing_terms],
        )
        logger.debug('Built phase record of %s at T=%s: %d species, %d mixing terms', self.phase_name,
                     temperature, record.num_species, len(record.mixing_terms))
        return record
