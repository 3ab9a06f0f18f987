import numpy as np
import pytest
from symengine import Symbol
from pysubi import Database
from pysubi import variables as v
from pysubi.core.energy import gibbs_energy
from pysubi.core.moles import mole_counts
from pysubi.core.site_fractions import site_fractions


def _kna_cl_va():
    "K+, NA+ : CL-, VA with Ci,Cj:Ak, Ci,Cj:Va and Ci:Aj,Dk parameters."
    dbf = Database()
    for name in ['K+', 'NA+', 'CL-', 'VA']:
        dbf.add_species(name)
    dbf.add_phase('IONIC_LIQ', {'subi': True}, [1, 1])
    dbf.add_phase_constituents('IONIC_LIQ', [['K+', 'NA+'], ['CL-', 'VA']])
    dbf.symbols['GKCL'] = -430000.0 + 100.0*v.T
    dbf.add_parameter('G', 'IONIC_LIQ', [['K+'], ['CL-']], 0, Symbol('GKCL'))
    dbf.add_parameter('G', 'IONIC_LIQ', [['NA+'], ['CL-']], 0, -400000.0 + 90.0*v.T)
    dbf.add_parameter('G', 'IONIC_LIQ', [['K+'], ['VA']], 0, 2000.0 - 10.0*v.T)
    dbf.add_parameter('G', 'IONIC_LIQ', [['NA+'], ['VA']], 0, 2500.0 - 9.0*v.T)
    dbf.add_parameter('L', 'IONIC_LIQ', [['K+', 'NA+'], ['CL-']], 0, -18000.0 + 5.0*v.T)
    dbf.add_parameter('L', 'IONIC_LIQ', [['K+', 'NA+'], ['CL-']], 1, -2000.0)
    dbf.add_parameter('L', 'IONIC_LIQ', [['K+', 'NA+'], ['VA']], 0, 3000.0)
    dbf.add_parameter('L', 'IONIC_LIQ', [['K+'], ['CL-', 'VA']], 0, -40000.0)
    dbf.add_parameter('L', 'IONIC_LIQ', [['K+'], ['CL-', 'VA']], 1, 5000.0)
    return dbf


def _camg_o_va_sio2():
    "CA+2, MG+2 : O-2, VA, SIO2 with every kind of mixing term."
    dbf = Database()
    for name in ['CA+2', 'MG+2', 'O-2', 'VA', 'SIO2']:
        dbf.add_species(name)
    dbf.add_phase('IONIC_LIQ', {'subi': True}, [1, 1])
    dbf.add_phase_constituents('IONIC_LIQ', [['CA+2', 'MG+2'], ['O-2', 'VA', 'SIO2']])
    dbf.add_parameter('G', 'IONIC_LIQ', [['CA+2'], ['O-2']], 0, -700000.0 + 120.0*v.T)
    dbf.add_parameter('G', 'IONIC_LIQ', [['MG+2'], ['O-2']], 0, -650000.0 + 110.0*v.T)
    dbf.add_parameter('G', 'IONIC_LIQ', [['CA+2'], ['VA']], 0, 10000.0 - 20.0*v.T)
    dbf.add_parameter('G', 'IONIC_LIQ', [['MG+2'], ['VA']], 0, 8000.0 - 15.0*v.T)
    dbf.add_parameter('G', 'IONIC_LIQ', [['SIO2']], 0, -950000.0 + 180.0*v.T)
    # Ci:Aj,Dk
    dbf.add_parameter('L', 'IONIC_LIQ', [['CA+2'], ['O-2', 'SIO2']], 0, -50000.0, shape=(1, 3, 2, 0, 0, 0))
    dbf.add_parameter('L', 'IONIC_LIQ', [['CA+2'], ['O-2', 'SIO2']], 1, 20000.0, shape=(1, 3, 2, 0, 0, 0))
    # Ci,Cj:Va
    dbf.add_parameter('L', 'IONIC_LIQ', [['CA+2', 'MG+2'], ['VA']], 0, 4000.0)
    # Ci,Cj:Ak
    dbf.add_parameter('L', 'IONIC_LIQ', [['CA+2', 'MG+2'], ['O-2']], 0, -30000.0)
    dbf.add_parameter('L', 'IONIC_LIQ', [['CA+2', 'MG+2'], ['O-2']], 2, 1500.0)
    # Ci:Va,Bj
    dbf.add_parameter('L', 'IONIC_LIQ', [['CA+2'], ['VA', 'SIO2']], 0, -20000.0)
    dbf.add_parameter('L', 'IONIC_LIQ', [['CA+2'], ['VA', 'SIO2']], 1, 3000.0)
    # Ci,Cj:Ak,Dl
    dbf.add_reciprocal_parameters('IONIC_LIQ', [['CA+2', 'MG+2'], ['O-2', 'SIO2']], [-10000.0, 2000.0, 3000.0])
    dbf.add_reciprocal_parameters('IONIC_LIQ', [['CA+2', 'MG+2'], ['O-2', 'VA']], [5000.0, -1500.0, 800.0])
    # Ci,Cj:Va,Bk
    dbf.add_parameter('L', 'IONIC_LIQ', [['CA+2', 'MG+2'], ['VA', 'SIO2']], 0, -7000.0, shape=(2, 2, 2, 4, 2, 1))
    dbf.add_parameter('L', 'IONIC_LIQ', [['CA+2', 'MG+2'], ['VA', 'SIO2']], 2, 2500.0)
    return dbf

def _camg_o_va_sio2_partial():
    """
    CA+2, MG+2 : O-2, VA, SIO2 with reciprocal coefficient series of even
    length, so some orders carry only a cation or only an anion coefficient.
    """
    dbf = Database()
    for name in ['CA+2', 'MG+2', 'O-2', 'VA', 'SIO2']:
        dbf.add_species(name)
    dbf.add_phase('IONIC_LIQ', {'subi': True}, [1, 1])
    dbf.add_phase_constituents('IONIC_LIQ', [['CA+2', 'MG+2'], ['O-2', 'VA', 'SIO2']])
    dbf.add_parameter('G', 'IONIC_LIQ', [['CA+2'], ['O-2']], 0, -700000.0 + 120.0*v.T)
    dbf.add_parameter('G', 'IONIC_LIQ', [['MG+2'], ['O-2']], 0, -650000.0 + 110.0*v.T)
    dbf.add_parameter('G', 'IONIC_LIQ', [['CA+2'], ['VA']], 0, 10000.0 - 20.0*v.T)
    dbf.add_parameter('G', 'IONIC_LIQ', [['MG+2'], ['VA']], 0, 8000.0 - 15.0*v.T)
    dbf.add_parameter('G', 'IONIC_LIQ', [['SIO2']], 0, -950000.0 + 180.0*v.T)
    # Orders 0 (cation only) and 1 (anion only)
    dbf.add_reciprocal_parameters('IONIC_LIQ', [['CA+2', 'MG+2'], ['O-2', 'SIO2']], [-10000.0, 2000.0])
    # Orders 0 (cation only), 1 (both) and 2 (anion only)
    dbf.add_reciprocal_parameters('IONIC_LIQ', [['CA+2', 'MG+2'], ['O-2', 'VA']],
                                  [5000.0, -1500.0, 800.0, 400.0])
    # Ci:Va,Bj written neutral first
    dbf.add_parameter('L', 'IONIC_LIQ', [['MG+2'], ['SIO2', 'VA']], 1, 6000.0)
    return dbf



def _k_ca_cl_va():
    "K+, CA+2 : VA, CL- with a single Ci,Cj:Va parameter."
    dbf = Database()
    for name in ['K+', 'CA+2', 'CL-', 'VA']:
        dbf.add_species(name)
    dbf.add_phase('IONIC_LIQ', {'subi': True}, [1, 1])
    dbf.add_phase_constituents('IONIC_LIQ', [['K+', 'CA+2'], ['VA', 'CL-']])
    dbf.add_parameter('G', 'IONIC_LIQ', [['K+'], ['CL-']], 0, -430000.0 + 100.0*v.T)
    dbf.add_parameter('G', 'IONIC_LIQ', [['CA+2'], ['CL-']], 0, -800000.0 + 150.0*v.T)
    dbf.add_parameter('G', 'IONIC_LIQ', [['K+'], ['VA']], 0, 2000.0 - 10.0*v.T)
    dbf.add_parameter('G', 'IONIC_LIQ', [['CA+2'], ['VA']], 0, 9000.0 - 12.0*v.T)
    dbf.add_parameter('L', 'IONIC_LIQ', [['CA+2', 'K+'], ['VA']], 0, -12000.0)
    return dbf


def _kna_cl_ideal():
    "K+, NA+ : CL- with endmember energies only."
    dbf = Database()
    for name in ['K+', 'NA+', 'CL-']:
        dbf.add_species(name)
    dbf.add_phase('IONIC_LIQ', {'subi': True}, [1, 1])
    dbf.add_phase_constituents('IONIC_LIQ', [['K+', 'NA+'], ['CL-']])
    dbf.add_parameter('G', 'IONIC_LIQ', [['K+'], ['CL-']], 0, -430000.0 + 100.0*v.T)
    dbf.add_parameter('G', 'IONIC_LIQ', [['NA+'], ['CL-']], 0, -400000.0 + 90.0*v.T)
    return dbf


TEST_DATABASES = {
    'KNA_CL_VA': _kna_cl_va,
    'CAMG_O_VA_SIO2': _camg_o_va_sio2,
    'CAMG_O_VA_SIO2_PARTIAL': _camg_o_va_sio2_partial,
    'K_CA_CL_VA': _k_ca_cl_va,
    'KNA_CL_IDEAL': _kna_cl_ideal,
}


@pytest.fixture(scope="session")
def load_database(request):
    """
    Helper fixture to load a database (parameterized by the value of `request`).
    """
    db = TEST_DATABASES[request.param]()
    def _load_database():
        return db
    return _load_database


def select_database(name):
    """
    Decorator to facilitate safe, fast loading of database objects. Use as

    ```
    @select_database("KNA_CL_VA")  # matches a builder in TEST_DATABASES
    def test_name_of_my_test(load_database):
        dbf = load_database()
        # ... implement test below
    ```

    The database is shared by all tests of the session; copy it before
    adding parameters.
    """
    return pytest.mark.parametrize("load_database", [name], indirect=True)


def total_gibbs_energy(record, moles, atoms_reference, moles_reference):
    """
    Gibbs energy of `moles` of species, extrapolated from the reference
    amounts: G(y(n)) (A0 + atoms . (n - n0)) / dMol(y(n)). Its derivatives
    at n0 are the chemical potentials.
    """
    sites = site_fractions(record, moles)
    dmol = mole_counts(record, sites).dmol
    atoms = atoms_reference + np.dot(record.species_atoms, np.asarray(moles) - np.asarray(moles_reference))
    return gibbs_energy(record, sites.cation, sites.anion) * atoms / dmol


def numerical_chemical_potentials(record, mole_fractions, step=1e-6):
    "Central differences of total_gibbs_energy with respect to the moles of each species."
    x0 = np.asarray(mole_fractions, dtype=float)
    atoms_reference = mole_counts(record, site_fractions(record, x0)).moles_of_atoms
    result = np.empty(len(x0))
    for idx in range(len(x0)):
        shift = np.zeros(len(x0))
        shift[idx] = step
        upper = total_gibbs_energy(record, x0 + shift, atoms_reference, x0)
        lower = total_gibbs_energy(record, x0 - shift, atoms_reference, x0)
        result[idx] = (upper - lower) / (2 * step)
    return result


def site_fraction_values(model, record, mole_fractions):
    "Map each SiteFraction symbol of `model` to its value at the given mole fractions."
    sites = site_fractions(record, mole_fractions)
    return dict(zip(model.site_fractions, np.concatenate([sites.cation, sites.anion])))
