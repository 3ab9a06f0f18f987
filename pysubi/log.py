"""
Logging for pysubi. Parameter classification reports skipped or dropped
database entries as warnings; site fractions and chemical potentials are
reported at debug level.
"""
import logging

LOG_FORMAT = '%(name)s %(levelname)s %(asctime)s [%(funcName)s %(lineno)d] %(message)s'

logger = logging.getLogger('pysubi')
handler = logging.StreamHandler()
handler.setFormatter(logging.Formatter(LOG_FORMAT))
logger.addHandler(handler)
logger.setLevel(logging.INFO)
logger.propagate = False


def debug_mode(stream=None):
    """
    Log debug messages of the SUBI evaluation.

    Parameters
    ----------
    stream : file-like, optional
        Destination of the log records. Defaults to the current stream
        of the pysubi handler (stderr).
    """
    if stream is not None:
        handler.setStream(stream)
    logger.setLevel(logging.DEBUG)
