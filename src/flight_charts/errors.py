"""Errors raised by the statistics helpers."""


class InsufficientSampleError(ValueError):
    """Not enough observations to compute a rate or fit."""


class DegenerateRegressionError(ValueError):
    """All x values are identical, so the OLS slope is undefined."""
