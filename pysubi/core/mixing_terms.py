"""
The mixing_terms module classifies the interaction parameters of a SUBI
(two-sublattice ionic liquid) phase into a closed set of mixing terms.

Every parameter row carries a shape code, a small tuple of structural
integers written by the database loader. The code selects one of the
mixing terms below; the order of the constituents in the row assigns
them to the roles of that term:

=========================  ==================  ===============================
shape code                 roles               mixing term
=========================  ==================  ===============================
``(1, 3, 2, *, *, 0)``     Ci, Aj, Dk          ``AnionInteraction``
``(1, 2, 2, *, *, *)``     Ci, Cj, Va          ``CationVacancyInteraction``
``(1, 2, 2, *, *, *)``     Ci, Cj, Ak          ``CationInteraction``
``(1, 3, 2, *, *, 1)``     Ci, Va, Bj          ``VacancyNeutralInteraction``
``(2, 2, 2, 4, 2, 0)``     Ci, Cj, Ak, Dl      ``ReciprocalInteraction``
``(2, 2, 2, 4, 2, 1)``     Ci, Cj, Va, Bk      ``TernaryVacancyNeutralInteraction``
=========================  ==================  ===============================

Sublattice 0 holds the cations (C). Sublattice 1 holds anions (A), the
vacancy (Va) and neutral species (B); D stands for any of them. The
vacancy and the neutral of the two vacancy/neutral terms are assigned by
kind, so they may be written in either order.

Each mixing term knows its own energy and the partial derivatives of that
energy with respect to every site fraction. ``energy`` only uses
arithmetic, so it accepts either floats or SymEngine expressions.
"""
from collections import namedtuple
from dataclasses import dataclass, fields, replace
from typing import Any, ClassVar, Optional
from pysubi.core.errors import UnrecognizedParameterShapeError, UnrecognizedSelectorError
from pysubi.log import logger

SiteIndex = namedtuple('SiteIndex', ['sublattice', 'index'])
SiteIndex.__doc__ = "Position of a constituent: sublattice (0 or 1) and index within that sublattice."

SHAPE_CODE_LENGTH = 6


def _power_derivative(base, exponent):
    """
    Return exponent * base**(exponent - 1).

    The singular case (base exactly zero, exponent below one) is omitted
    and contributes zero.
    """
    if exponent == 0:
        return 0.0
    if base == 0 and exponent < 1:
        return 0.0
    return exponent * base ** (exponent - 1)


def _add(dgdc, site, value):
    dgdc[site.sublattice][site.index] += value


@dataclass(frozen=True)
class AnionInteraction:
    """
    Ci:Aj,Dk -- one cation, two sublattice 1 constituents.

    G = y_Ci y_Aj y_Dk L (y_Aj - y_Dk)**n
    """
    mix_type: ClassVar[int] = 1
    notation: ClassVar[str] = 'Ci:Aj,Dk'
    cation: SiteIndex
    first: SiteIndex
    second: SiteIndex
    order: int
    coefficient: Any

    def energy(self, y, q):
        yc, ya, yd = y[self.cation], y[self.first], y[self.second]
        return yc * ya * yd * self.coefficient * (ya - yd) ** self.order

    def accumulate_gradient(self, y, q, cation_charges, dgdc):
        yc, ya, yd = y[self.cation], y[self.first], y[self.second]
        diff = ya - yd
        poly = self.coefficient * diff ** self.order
        dpoly = self.coefficient * _power_derivative(diff, self.order)
        _add(dgdc, self.cation, ya * yd * poly)
        _add(dgdc, self.first, yc * yd * poly + yc * ya * yd * dpoly)
        _add(dgdc, self.second, yc * ya * poly - yc * ya * yd * dpoly)


@dataclass(frozen=True)
class CationVacancyInteraction:
    """
    Ci,Cj:Va -- two cations mixing on sublattice 0 with the vacancy.

    G = Q y_Ci y_Cj y_Va**2 L (y_Ci - y_Cj)**n
    """
    mix_type: ClassVar[int] = 2
    notation: ClassVar[str] = 'Ci,Cj:Va'
    first_cation: SiteIndex
    second_cation: SiteIndex
    vacancy: SiteIndex
    order: int
    coefficient: Any

    def energy(self, y, q):
        yi, yj, yv = y[self.first_cation], y[self.second_cation], y[self.vacancy]
        return q * yi * yj * yv**2 * self.coefficient * (yi - yj) ** self.order

    def accumulate_gradient(self, y, q, cation_charges, dgdc):
        yi, yj, yv = y[self.first_cation], y[self.second_cation], y[self.vacancy]
        diff = yi - yj
        poly = self.coefficient * diff ** self.order
        dpoly = self.coefficient * _power_derivative(diff, self.order)
        # dQ/dy_c = charge of c, for every cation
        dgdc[0] += cation_charges * (yi * yj * yv**2 * poly)
        _add(dgdc, self.first_cation, q * (yj * yv**2 * poly + yi * yj * yv**2 * dpoly))
        _add(dgdc, self.second_cation, q * (yi * yv**2 * poly - yi * yj * yv**2 * dpoly))
        _add(dgdc, self.vacancy, q * yi * yj * 2 * yv * poly)


@dataclass(frozen=True)
class CationInteraction:
    """
    Ci,Cj:Ak -- two cations mixing on sublattice 0 with one anion or neutral.

    G = y_Ci y_Cj y_Ak L (y_Ci - y_Cj)**n
    """
    mix_type: ClassVar[int] = 3
    notation: ClassVar[str] = 'Ci,Cj:Ak'
    first_cation: SiteIndex
    second_cation: SiteIndex
    anion: SiteIndex
    order: int
    coefficient: Any

    def energy(self, y, q):
        yi, yj, ya = y[self.first_cation], y[self.second_cation], y[self.anion]
        return yi * yj * ya * self.coefficient * (yi - yj) ** self.order

    def accumulate_gradient(self, y, q, cation_charges, dgdc):
        yi, yj, ya = y[self.first_cation], y[self.second_cation], y[self.anion]
        diff = yi - yj
        poly = self.coefficient * diff ** self.order
        dpoly = self.coefficient * _power_derivative(diff, self.order)
        _add(dgdc, self.first_cation, yj * ya * poly + yi * yj * ya * dpoly)
        _add(dgdc, self.second_cation, yi * ya * poly - yi * yj * ya * dpoly)
        _add(dgdc, self.anion, yi * yj * poly)


@dataclass(frozen=True)
class VacancyNeutralInteraction:
    """
    Ci:Va,Bj -- one cation, the vacancy and one neutral.

    G = Q y_Ci y_Va y_Bj L (y_Ci y_Va - y_Bj)**n
    """
    mix_type: ClassVar[int] = 4
    notation: ClassVar[str] = 'Ci:Va,Bj'
    cation: SiteIndex
    vacancy: SiteIndex
    neutral: SiteIndex
    order: int
    coefficient: Any

    def energy(self, y, q):
        yc, yv, yb = y[self.cation], y[self.vacancy], y[self.neutral]
        return q * yc * yv * yb * self.coefficient * (yc * yv - yb) ** self.order

    def accumulate_gradient(self, y, q, cation_charges, dgdc):
        yc, yv, yb = y[self.cation], y[self.vacancy], y[self.neutral]
        diff = yc * yv - yb
        poly = self.coefficient * diff ** self.order
        dpoly = self.coefficient * _power_derivative(diff, self.order)
        dgdc[0] += cation_charges * (yc * yv * yb * poly)
        _add(dgdc, self.cation, q * (yv * yb * poly + yc * yv * yb * dpoly * yv))
        _add(dgdc, self.vacancy, q * (yc * yb * poly + yc * yv * yb * dpoly * yc))
        _add(dgdc, self.neutral, q * (yc * yv * poly - yc * yv * yb * dpoly))


@dataclass(frozen=True)
class ReciprocalInteraction:
    """
    Ci,Cj:Ak,Dl -- reciprocal interaction between two cations and two
    sublattice 1 constituents.

    G = y_Ci y_Cj y_Ak y_Dl [Lc (y_Ci - y_Cj)**n + La (y_Ak - y_Dl)**n]

    Either coefficient may be None, in which case its term is absent. The
    anion coefficient is only used for n >= 1.
    """
    mix_type: ClassVar[int] = 11
    notation: ClassVar[str] = 'Ci,Cj:Ak,Dl'
    first_cation: SiteIndex
    second_cation: SiteIndex
    first_anion: SiteIndex
    second_anion: SiteIndex
    order: int
    cation_coefficient: Any
    anion_coefficient: Optional[Any] = None

    def _polynomial(self, yi, yj, ya, yd):
        poly = 0
        if self.cation_coefficient is not None:
            poly += self.cation_coefficient * (yi - yj) ** self.order
        if self.anion_coefficient is not None and self.order >= 1:
            poly += self.anion_coefficient * (ya - yd) ** self.order
        return poly

    def energy(self, y, q):
        yi, yj = y[self.first_cation], y[self.second_cation]
        ya, yd = y[self.first_anion], y[self.second_anion]
        return yi * yj * ya * yd * self._polynomial(yi, yj, ya, yd)

    def accumulate_gradient(self, y, q, cation_charges, dgdc):
        yi, yj = y[self.first_cation], y[self.second_cation]
        ya, yd = y[self.first_anion], y[self.second_anion]
        prefactor = yi * yj * ya * yd
        poly = self._polynomial(yi, yj, ya, yd)
        dcation = 0.0
        danion = 0.0
        if self.cation_coefficient is not None:
            dcation = self.cation_coefficient * _power_derivative(yi - yj, self.order)
        if self.anion_coefficient is not None and self.order >= 1:
            danion = self.anion_coefficient * _power_derivative(ya - yd, self.order)
        _add(dgdc, self.first_cation, yj * ya * yd * poly + prefactor * dcation)
        _add(dgdc, self.second_cation, yi * ya * yd * poly - prefactor * dcation)
        _add(dgdc, self.first_anion, yi * yj * yd * poly + prefactor * danion)
        _add(dgdc, self.second_anion, yi * yj * ya * poly - prefactor * danion)


@dataclass(frozen=True)
class TernaryVacancyNeutralInteraction:
    """
    Ci,Cj:Va,Bk -- two cations, the vacancy and one neutral.

    G = Q y_Ci y_Cj y_Va**2 y_Bk L (s + f)

    with f = (1 - y_Ci y_Va - y_Cj y_Va - y_Bk) / 3 and s selected by the
    role selector: y_Ci y_Va (0), y_Cj y_Va (1) or y_Bk (2).
    """
    mix_type: ClassVar[int] = 12
    notation: ClassVar[str] = 'Ci,Cj:Va,Bk'
    first_cation: SiteIndex
    second_cation: SiteIndex
    vacancy: SiteIndex
    neutral: SiteIndex
    selector: int
    coefficient: Any

    def _weight(self, yi, yj, yv, yb):
        f = (1 - yi * yv - yj * yv - yb) / 3
        if self.selector == 0:
            return yi * yv + f
        elif self.selector == 1:
            return yj * yv + f
        return yb + f

    def energy(self, y, q):
        yi, yj = y[self.first_cation], y[self.second_cation]
        yv, yb = y[self.vacancy], y[self.neutral]
        return q * yi * yj * yv**2 * yb * self._weight(yi, yj, yv, yb) * self.coefficient

    def accumulate_gradient(self, y, q, cation_charges, dgdc):
        yi, yj = y[self.first_cation], y[self.second_cation]
        yv, yb = y[self.vacancy], y[self.neutral]
        prefactor = yi * yj * yv**2 * yb
        weight = self._weight(yi, yj, yv, yb)
        coef = self.coefficient
        # Partial derivatives of the weight s + f
        dweight_di = (yv if self.selector == 0 else 0.0) - yv / 3
        dweight_dj = (yv if self.selector == 1 else 0.0) - yv / 3
        dweight_dv = (yi if self.selector == 0 else 0.0) + (yj if self.selector == 1 else 0.0) - (yi + yj) / 3
        dweight_db = (1.0 if self.selector == 2 else 0.0) - 1.0 / 3
        dgdc[0] += cation_charges * (prefactor * weight * coef)
        _add(dgdc, self.first_cation, q * coef * (yj * yv**2 * yb * weight + prefactor * dweight_di))
        _add(dgdc, self.second_cation, q * coef * (yi * yv**2 * yb * weight + prefactor * dweight_dj))
        _add(dgdc, self.vacancy, q * coef * (2 * yi * yj * yv * yb * weight + prefactor * dweight_dv))
        _add(dgdc, self.neutral, q * coef * (yi * yj * yv**2 * weight + prefactor * dweight_db))


def evaluate_coefficients(term, evaluate):
    "Copy of a mixing term with evaluate() applied to each coefficient it has."
    changes = {field.name: evaluate(getattr(term, field.name)) for field in fields(term)
               if field.name.endswith('coefficient') and getattr(term, field.name) is not None}
    return replace(term, **changes)


def infer_shape_code(constituent_array):
    """
    Shape code for a parameter whose loader did not provide one.

    Parameters
    ----------
    constituent_array : tuple of tuple of Species
        Constituents of the parameter, one tuple per sublattice.

    Returns
    -------
    tuple
        Shape code of length SHAPE_CODE_LENGTH. Constituent arrays of no known
        pattern get a code that classifies as unrecognized.
    """
    if len(constituent_array) != 2:
        return (len(constituent_array),) + (0,) * (SHAPE_CODE_LENGTH - 1)
    num_cations, num_anions = len(constituent_array[0]), len(constituent_array[1])
    anions = constituent_array[1]
    vacancy_neutral = int(num_anions == 2 and any(s.is_vacancy for s in anions) and
                          any(s.is_neutral for s in anions))
    if (num_cations, num_anions) == (1, 2):
        return (1, 3, 2, 0, 0, vacancy_neutral)
    elif (num_cations, num_anions) == (2, 1):
        return (1, 2, 2, 0, 0, 0)
    elif (num_cations, num_anions) == (2, 2):
        return (2, 2, 2, 4, 2, vacancy_neutral)
    return (num_cations, num_anions) + (0,) * (SHAPE_CODE_LENGTH - 2)


def _vacancy_first(constituent_array):
    "Constituent array with the vacancy leading sublattice 1."
    if len(constituent_array) != 2:
        return constituent_array
    cations, second = constituent_array
    return cations, tuple(sorted(second, key=lambda spec: not spec.is_vacancy))


def _flatten_constituents(constituent_array):
    "Ordered list of (sublattice, Species). A single sublattice holds neutral species on sublattice 1."
    if len(constituent_array) == 1:
        return [(1, spec) for spec in constituent_array[0]]
    return [(subl_idx, spec) for subl_idx, subl in enumerate(constituent_array) for spec in subl]


class ParameterClassifier(object):
    """
    Resolve parameter rows of one phase into mixing terms.

    Parameters
    ----------
    phase_name : str
        Name of the phase, used in error messages.
    constituents : sequence of sequence of Species
        Constituents of sublattice 0 (cations) and sublattice 1 (anions,
        vacancy, neutrals) in the order their site fractions are stored.
    """
    def __init__(self, phase_name, constituents):
        self.phase_name = phase_name
        self.constituents = [list(subl) for subl in constituents]

    def _error(self, param, reason):
        return UnrecognizedParameterShapeError(
            'Unrecognized excess mixing term {} in SUBI phase {}: {}'.format(
                param['constituent_array'], self.phase_name, reason), phase_name=self.phase_name)

    def _resolve(self, param, roles):
        """
        Map the constituents of a parameter onto SiteIndex objects, checking
        each against its role: 'C' cation, 'D' any sublattice 1 constituent,
        'V' the vacancy, 'B' a neutral.
        """
        flat = _flatten_constituents(param['constituent_array'])
        if len(flat) != len(roles):
            raise self._error(param, 'expected {} constituents, got {}'.format(len(roles), len(flat)))
        sites = []
        for (subl_idx, spec), role in zip(flat, roles):
            expected_sublattice = 0 if role == 'C' else 1
            if subl_idx != expected_sublattice:
                raise self._error(param, '{} is not on sublattice {}'.format(spec, expected_sublattice))
            if role == 'V' and not spec.is_vacancy:
                raise self._error(param, '{} is not the vacancy'.format(spec))
            if role == 'B' and not spec.is_neutral:
                raise self._error(param, '{} is not a neutral species'.format(spec))
            try:
                sites.append(SiteIndex(subl_idx, self.constituents[subl_idx].index(spec)))
            except ValueError:
                raise self._error(param, '{} is not a constituent of sublattice {}'.format(spec, subl_idx))
        return sites

    @staticmethod
    def _with_vacancy_first(param):
        return dict(param, constituent_array=_vacancy_first(param['constituent_array']))

    def classify(self, param, coefficient, anion_coefficient=None):
        """
        Classify one parameter row.

        Parameters
        ----------
        param : dict
            Parameter row with 'constituent_array', 'parameter_order' and,
            optionally, 'shape'.
        coefficient : float or SymEngine object
            Value of the parameter.
        anion_coefficient : float or SymEngine object, optional
            Second coefficient of a reciprocal parameter.

        Returns
        -------
        mixing term object

        Raises
        ------
        UnrecognizedParameterShapeError
            The shape code, or the constituents, match no mixing term.
        UnrecognizedSelectorError
            Role selector of a Ci,Cj:Va,Bk parameter outside of {0, 1, 2}.
        """
        shape = param.get('shape')
        if shape is None:
            shape = infer_shape_code(param['constituent_array'])
        shape = tuple(shape) + (0,) * (SHAPE_CODE_LENGTH - len(shape))
        order = int(param['parameter_order'])
        if shape[:3] == (1, 3, 2) and shape[5] == 0:
            cation, first, second = self._resolve(param, 'CDD')
            term = AnionInteraction(cation, first, second, order, coefficient)
        elif shape[:3] == (1, 2, 2):
            first_cation, second_cation, last = self._resolve(param, 'CCD')
            if self.constituents[1][last.index].is_vacancy:
                term = CationVacancyInteraction(first_cation, second_cation, last, order, coefficient)
            else:
                term = CationInteraction(first_cation, second_cation, last, order, coefficient)
        elif shape[:3] == (1, 3, 2) and shape[5] == 1:
            cation, vacancy, neutral = self._resolve(self._with_vacancy_first(param), 'CVB')
            term = VacancyNeutralInteraction(cation, vacancy, neutral, order, coefficient)
        elif shape == (2, 2, 2, 4, 2, 0):
            sites = self._resolve(param, 'CCDD')
            if order < 1 and anion_coefficient is not None:
                logger.warning('Ignoring anion coefficient of zeroth-order reciprocal parameter %s in %s',
                               param['constituent_array'], self.phase_name)
                anion_coefficient = None
            term = ReciprocalInteraction(*sites, order, coefficient, anion_coefficient)
        elif shape == (2, 2, 2, 4, 2, 1):
            sites = self._resolve(self._with_vacancy_first(param), 'CCVB')
            if order not in (0, 1, 2):
                raise UnrecognizedSelectorError(
                    'Unrecognized role selector {} of Ci,Cj:Va,Bk parameter {} in SUBI phase {}'.format(
                        order, param['constituent_array'], self.phase_name), phase_name=self.phase_name)
            term = TernaryVacancyNeutralInteraction(*sites, order, coefficient)
        else:
            raise self._error(param, 'shape code {}'.format(shape))
        logger.debug('Classified %s in %s as %s (type %d)', param['constituent_array'], self.phase_name,
                     term.notation, term.mix_type)
        return term
