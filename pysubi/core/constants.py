"""
The constants module contains some numerical constants for use
in the module.
Note that modifying these may yield unpredictable results.
"""
# Site fractions are clipped to this amount inside logarithms of derivatives,
# for numerical stability. Energies use the exact x*log(x) -> 0 limit.
MIN_SITE_FRACTION = 1e-14

# Error codes reported by SUBIError subclasses
UNRECOGNIZED_PARAMETER_SHAPE = 36
UNRECOGNIZED_SELECTOR = 37
DEGENERATE_SUBLATTICE = 38
