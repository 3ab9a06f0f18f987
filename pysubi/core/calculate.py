"""
The calculate module evaluates the chemical potentials of a SUBI phase
over many compositions and temperatures.
"""
import numpy as np
import pysubi.variables as v
from pysubi.core.chemical_potentials import subi_chemical_potentials
from pysubi.core.errors import CalculateError
from pysubi.core.light_dataset import LightDataset
from pysubi.core.utils import unpack_condition
from pysubi.log import logger
from pysubi.model import ModelSUBI


def calculate(dbf, comps, phase_name, temperature, points, model=None, parameters=None, to_xarray=True):
    """
    Evaluate the chemical potentials of the species of a SUBI phase.

    Parameters
    ----------
    dbf : Database
        Thermodynamic database containing the relevant parameters.
    comps : str or sequence
        Names of components to consider in the calculation.
    phase_name : str
        Name of the SUBI phase.
    temperature : float, tuple or sequence
        Temperatures in K, see `unpack_condition`.
    points : ndarray
        Species mole fractions, one row per composition, columns in the
        species order of the phase (see ModelSUBI.species_names).
    model : ModelSUBI, optional
        Prebuilt model of the phase. Built from `dbf` if omitted.
    parameters : dict, optional
        Maps SymEngine Symbol to numbers, for overriding the values of parameters in the Database.
    to_xarray : bool
        Whether to return an xarray Dataset (True, default) or a LightDataset.

    Returns
    -------
    Dataset with dimensions T, points, species and internal_dof
        MU and GM are in J/mol per formula unit; Y are the site fractions,
        X the formula-consistent mole fractions.

    Examples
    --------
    >>> calculate(dbf, ['K', 'NA', 'CL'], 'IONIC_LIQ', 1100., [[0.5, 0.5]])  # doctest: +SKIP
    """
    if isinstance(comps, str):
        comps = [comps]
    if model is None:
        model = ModelSUBI(dbf, comps, phase_name, parameters=parameters)
    elif model.phase_name != phase_name.upper():
        raise CalculateError('Model of {} passed for phase {}'.format(model.phase_name, phase_name))
    temperatures = np.asarray(unpack_condition(temperature), dtype=float)
    points = np.atleast_2d(np.asarray(points, dtype=float))
    num_species = len(model.species)
    if points.ndim != 2 or points.shape[1] != num_species:
        raise CalculateError('Points of {} must have {} columns ({}), got shape {}'.format(
            model.phase_name, num_species, model.species_names, points.shape))
    if np.any(points < 0):
        raise CalculateError('Negative mole fractions in points of {}'.format(model.phase_name))

    num_dof = len(model.site_fractions)
    shape = (len(temperatures), points.shape[0])
    mu = np.empty(shape + (num_species,))
    x = np.empty(shape + (num_species,))
    y = np.empty(shape + (num_dof,))
    gm = np.empty(shape)
    p = np.empty(shape)
    q = np.empty(shape)
    dmol = np.empty(shape)
    for t_idx, temp in enumerate(temperatures):
        record = model.phase_record(temp)
        rt = float(v.R) * temp
        for pt_idx, point in enumerate(points):
            result = subi_chemical_potentials(record, point)
            mu[t_idx, pt_idx] = result.chemical_potentials * rt
            x[t_idx, pt_idx] = result.mole_fractions
            y[t_idx, pt_idx] = np.concatenate(result.site_fractions)
            gm[t_idx, pt_idx] = result.gibbs_energy * rt
            p[t_idx, pt_idx] = result.P
            q[t_idx, pt_idx] = result.Q
            dmol[t_idx, pt_idx] = result.dmol
    logger.debug('Calculated %d points at %d temperatures for %s', points.shape[0], len(temperatures),
                 model.phase_name)

    dims = ['T', 'points']
    result = LightDataset({'MU': (dims + ['species'], mu), 'X': (dims + ['species'], x),
                           'Y': (dims + ['internal_dof'], y), 'GM': (dims, gm), 'P': (dims, p),
                           'Q': (dims, q), 'DMOL': (dims, dmol)},
                          coords={'T': temperatures, 'points': np.arange(points.shape[0]),
                                  'species': model.species_names,
                                  'internal_dof': [str(s) for s in model.site_fractions]},
                          attrs={'phase_name': model.phase_name})
    if to_xarray:
        return result.get_dataset()
    return result
