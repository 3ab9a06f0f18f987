"""Defines a class for internally representing arrays of calculation results"""

from xarray import Dataset


class LightDataset:
    """
    Lightweight wrapper around an xarray Dataset.

    Attributes
    ----------
    data_vars : dict
    coords : dict
    attrs : dict

    Notes
    -----
    LightDataset takes the same constructor arguments as an xarray Dataset
    but offers only attribute and item access to its variables. Results of
    calculate() are kept in this form; get_dataset() converts them when
    the labelled xarray functionality is needed.

    """
    def __init__(self, data_vars=None, coords=None, attrs=None):
        """

        Parameters
        ----------
        data_vars :
            Dictionary of {Variable: (Dimensions, Values)}
        coords :
            Mapping of {Dimension: Values}
        attrs :

        Returns
        -------
        LightDataset

        """
        self.data_vars = data_vars or dict()
        self.coords = coords or dict()
        self.attrs = attrs or dict()
        for var, (coord, values) in self.data_vars.items():
            setattr(self, var, values)
        for coord, values in self.coords.items():
            setattr(self, coord, values)

    def get_dataset(self):
        """Build an xarray Dataset"""
        return Dataset(self.data_vars, self.coords, self.attrs)

    def __getitem__(self, item):
        if item not in self.data_vars and item not in self.coords:
            raise KeyError("`{}` is not a variable or coordinate".format(item))
        return getattr(self, item)

    def __contains__(self, item):
        return item in self.data_vars or item in self.coords
