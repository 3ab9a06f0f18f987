"""
The utils module holds small helpers shared by the model and calculate.
"""
from collections.abc import Iterable
import numpy as np
from symengine import Symbol
import pysubi.variables as v


def unpack_condition(tup):
    """
    Convert a temperature condition to a one-dimensional array.

    A number is a single point, a (start, stop, step) tuple is expanded with
    numpy.arange, and any other iterable is used as given.
    """
    if isinstance(tup, tuple):
        if len(tup) != 3:
            raise ValueError('Condition tuple must be (start, stop, step), got length {}'.format(len(tup)))
        return np.arange(*tup, dtype=np.float64)
    if isinstance(tup, Iterable):
        return np.array([float(x) for x in tup], dtype=np.float64)
    return np.array([float(tup)], dtype=np.float64)


def unpack_components(dbf, comps):
    """
    Species of the database made only of the elements named in comps.

    Parameters
    ----------
    dbf : Database
    comps : list
        Element or species names; 'VA' activates the vacancy.

    Returns
    -------
    set
        Set of Species objects
    """
    elements = set()
    for comp in comps:
        elements.update(v.Species(str(comp)).constituents.keys())
    return {spec for spec in dbf.species if set(spec.constituents.keys()) <= elements}


def wrap_symbol(obj):
    "Parameter names may be given as strings or symbols."
    return obj if isinstance(obj, Symbol) else Symbol(obj)
