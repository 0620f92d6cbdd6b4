from __future__ import annotations


class DistributionError(ValueError):
    """Base class for failures of the empirical distribution routines."""


class EmptyDatasetError(DistributionError):
    """Raised when a lookup or summary is requested on no data."""


class OutOfRangeError(DistributionError):
    """Raised for probabilities outside the table range or invalid durations."""


class DegenerateDistributionError(DistributionError):
    """Raised when two neighbouring samples leave nothing to interpolate across."""
