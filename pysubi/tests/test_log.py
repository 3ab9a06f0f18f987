"""
The test_log module verifies the pysubi logger configuration.
"""
import io
import logging
import numpy as np
from pysubi import ModelSUBI, subi_chemical_potentials
from pysubi.log import logger, handler, debug_mode
from pysubi.tests.fixtures import select_database, load_database


@select_database("KNA_CL_IDEAL")
def test_debug_mode_reports_evaluation(load_database):
    record = ModelSUBI(load_database(), ['K', 'NA', 'CL'], 'IONIC_LIQ').phase_record(1200.)
    previous_stream = handler.stream
    previous_level = logger.level
    stream = io.StringIO()
    try:
        debug_mode(stream)
        assert logger.level == logging.DEBUG
        subi_chemical_potentials(record, np.array([0.5, 0.5]))
    finally:
        handler.setStream(previous_stream)
        logger.setLevel(previous_level)
    output = stream.getvalue()
    assert 'IONIC_LIQ: site fractions' in output
    assert 'pysubi DEBUG' in output
