"""Pyparsing grammar for species formulas."""

from pyparsing import Group, OneOrMore, Optional, ParseException, Regex, StringEnd, Suppress

# Charges are written with a trailing sign: 'K+', 'CA+2', 'CL-', 'O-2'.
# The slash form used in TDB species names ('CA/+2') is also accepted.
charge_number = Regex(r'[+-][0-9]*').set_parse_action(
    lambda t: [int(t[0][0] + (t[0][1:] or '1'))])
amount_number = Regex(r'[0-9]*\.?[0-9]+').set_parse_action(lambda t: [float(t[0])])
element_symbol = Regex(r'[A-Z][A-Z]?')

chemical_formula = Group(OneOrMore(Group(element_symbol + Optional(amount_number, default=1.0)))) + \
                   Optional(Suppress(Optional('/')) + charge_number, default=0) + StringEnd()


def parse_chemical_formula(formula):
    """
    Split a species formula into its elements and charge.

    Parameters
    ----------
    formula : str
        Species formula, e.g. 'CA+2' or 'SIO2'.

    Returns
    -------
    tuple
        ([(element, amount), ...], charge)

    Examples
    --------
    >>> parse_chemical_formula('CA+2')
    ([('CA', 1.0)], 2)
    >>> parse_chemical_formula('SIO2')
    ([('SI', 1.0), ('O', 2.0)], 0)
    """
    try:
        toks = chemical_formula.parse_string(formula.upper())
    except ParseException as e:
        raise ValueError('Invalid species formula {!r}: {}'.format(formula, e)) from e
    sym_amnts = [(str(el), float(amnt)) for el, amnt in toks[0]]
    return sym_amnts, int(toks[1])
