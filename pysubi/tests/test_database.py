"""
The test_database module contains tests for the Database object.
"""
import copy
import pickle
import pytest
from tinydb import where
from pysubi import Database
from pysubi import variables as v
from pysubi.io.database import link_reciprocal_coefficients
from pysubi.tests.fixtures import select_database, load_database


def test_add_species_registers_elements():
    dbf = Database()
    dbf.add_species('CA+2')
    dbf.add_species('SIO2')
    assert dbf.elements == {'CA', 'SI', 'O'}
    assert v.Species('CA+2') in dbf.species
    assert {s.charge for s in dbf.species} == {2, 0}


@select_database("KNA_CL_VA")
def test_phase_constituents_are_species(load_database):
    dbf = load_database()
    phase = dbf.phases['IONIC_LIQ']
    assert phase.model_hints == {'subi': True}
    assert phase.constituents == (frozenset([v.Species('K+'), v.Species('NA+')]),
                                  frozenset([v.Species('CL-'), v.Species('VA')]))


def test_undefined_constituent_raises():
    dbf = Database()
    dbf.add_species('K+')
    dbf.add_phase('IONIC_LIQ', {'subi': True}, [1, 1])
    with pytest.raises(KeyError):
        dbf.add_phase_constituents('IONIC_LIQ', [['K+'], ['CL-']])


@select_database("KNA_CL_VA")
def test_interaction_order_is_kept(load_database):
    "Constituents of a parameter keep the order they were given in."
    dbf = load_database()
    params = dbf.search((where('parameter_type') == 'L') & (where('parameter_order') == 0) &
                        (where('constituent_array') == ((v.Species('K+'),), (v.Species('CL-'), v.Species('VA')))))
    assert len(params) == 1
    assert params[0]['parameter'] == -40000.0


def test_shape_code_stored_as_tuple():
    dbf = Database()
    for name in ['CA+2', 'MG+2', 'VA', 'SIO2']:
        dbf.add_species(name)
    dbf.add_parameter('L', 'ionic_liq', [['CA+2', 'MG+2'], ['VA', 'SIO2']], 1, -500.0, shape=[2, 2, 2, 4, 2, 1])
    param, = dbf.phase_parameters('IONIC_LIQ', 'L')
    assert param['shape'] == (2, 2, 2, 4, 2, 1)
    assert param['phase_name'] == 'IONIC_LIQ'
    assert param['constituent_array'][1] == (v.Species('VA'), v.Species('SIO2'))


@pytest.mark.parametrize('coefficients, expected', [
    ([-1000.0], [(0, -1000.0, None)]),
    ([-1000.0, 200.0], [(0, -1000.0, None), (1, None, 200.0)]),
    ([-1000.0, 200.0, 300.0], [(0, -1000.0, None), (1, 300.0, 200.0)]),
    ([-1000.0, 200.0, 300.0, 40.0, 50.0], [(0, -1000.0, None), (1, 300.0, 200.0), (2, 50.0, 40.0)]),
    ([], []),
])
def test_link_reciprocal_coefficients(coefficients, expected):
    "Position 2n+1 holds the cation coefficient and 2n the anion coefficient of order n."
    assert link_reciprocal_coefficients(coefficients) == expected


def test_add_reciprocal_parameters():
    dbf = Database()
    for name in ['CA+2', 'MG+2', 'O-2', 'SIO2']:
        dbf.add_species(name)
    dbf.add_reciprocal_parameters('IONIC_LIQ', [['CA+2', 'MG+2'], ['O-2', 'SIO2']], [-10000.0, 2000.0, 3000.0])
    params = sorted(dbf.phase_parameters('IONIC_LIQ', 'L'), key=lambda p: p['parameter_order'])
    assert [p['parameter_order'] for p in params] == [0, 1]
    assert [p['parameter'] for p in params] == [-10000.0, 3000.0]
    assert [p['anion_parameter'] for p in params] == [None, 2000.0]
    assert all(p['shape'] == (2, 2, 2, 4, 2, 0) for p in params)


def test_delayed_insert():
    dbf = Database()
    dbf.add_species('K+')
    dbf.add_species('CL-')
    dbf.add_parameter('G', 'IONIC_LIQ', [['K+'], ['CL-']], 0, -1.0, force_insert=False)
    assert len(dbf.phase_parameters('IONIC_LIQ', 'G')) == 0
    dbf.process_parameter_queue()
    assert len(dbf.phase_parameters('IONIC_LIQ', 'G')) == 1


@select_database("CAMG_O_VA_SIO2")
def test_database_pickle_and_deepcopy(load_database):
    dbf = load_database()
    assert pickle.loads(pickle.dumps(dbf)) == dbf
    dbf_copy = copy.deepcopy(dbf)
    assert dbf_copy == dbf
    dbf_copy.add_parameter('L', 'IONIC_LIQ', [['CA+2', 'MG+2'], ['SIO2']], 0, 1.0)
    assert dbf_copy != dbf


@select_database("CAMG_O_VA_SIO2")
def test_database_str(load_database):
    text = str(load_database())
    assert 'IONIC_LIQ' in text
    assert 'parameters in database' in text
