import warnings
warnings.filterwarnings('ignore', message='divide by zero encountered in log')

from pysubi.core.errors import *
import pysubi.variables as v
from pysubi.model import ModelSUBI
from pysubi.io.database import Database
from pysubi.core.chemical_potentials import subi_chemical_potentials, SUBIResult
from pysubi.core.calculate import calculate

# Set the version of pysubi from the metadata of the installed package
from importlib.metadata import version, PackageNotFoundError
try:
    __version__ = version("pysubi")
except PackageNotFoundError:
    __version__ = "unknown"
del version, PackageNotFoundError
