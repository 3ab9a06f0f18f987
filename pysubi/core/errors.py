from pysubi.core.constants import UNRECOGNIZED_PARAMETER_SHAPE, UNRECOGNIZED_SELECTOR, \
    DEGENERATE_SUBLATTICE


class SUBIError(Exception):
    """
    Base exception for failures while evaluating a SUBI phase.

    The integer `code` identifies the failure for callers that only track
    a status flag (e.g. a minimizer iteration loop).
    """
    code = 0

    def __init__(self, message, phase_name=None):
        super().__init__(message)
        self.phase_name = phase_name


class UnrecognizedParameterShapeError(SUBIError):
    "Interaction parameter whose shape code matches no known mixing term."
    code = UNRECOGNIZED_PARAMETER_SHAPE


class UnrecognizedSelectorError(SUBIError):
    "Ci,Cj:Va,Bk parameter with a role selector outside of {0, 1, 2}."
    code = UNRECOGNIZED_SELECTOR


class DegenerateSublatticeError(SUBIError):
    "Raw occupation of a sublattice sums to zero."
    code = DEGENERATE_SUBLATTICE


class CalculateError(Exception):
    "Exception related to use of calculate() function."


class DofError(Exception):
    "Error due to missing degrees of freedom."
    pass
