"""Exception hierarchy for the candidate-selection package.

All errors derive from `SelectionError`, which is itself a `ValueError`, so
callers that already catch `ValueError` around the loaders keep working.
Per-candidate outcomes are never signalled with exceptions: a candidate that
fails a cut is a normal "rejected" result.
"""

from __future__ import annotations


class SelectionError(ValueError):
    """Base class for all errors raised by this package."""


class ConfigurationError(SelectionError):
    """Invalid selection configuration, detected before any candidate is processed.

    Examples:
    - pT bin edges not strictly increasing
    - cut table shape not matching the bin edges
    - a cut label required by the selector missing from the table
    - an n-sigma window with min > max
    """


class InputError(SelectionError):
    """Malformed candidate/track input.

    Examples:
    - JSON payload missing a required key
    - candidate referencing a track id absent from the event
    """
