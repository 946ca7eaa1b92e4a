"""Exceptions raised by prcheck.

Only failures that must abort a cycle are modelled as exceptions. Expected
operational conditions (a reviewer missing from the census, an issue that
cannot be found, a stale running check) degrade gracefully and are logged.
"""

from __future__ import annotations


class PrcheckError(Exception):
    """Base class for all prcheck errors."""


class ConfigurationError(PrcheckError):
    """The deployment is broken (missing digest algorithm, census, store type).

    Never retried: running the same cycle again cannot fix it.
    """


class MaterializationError(PrcheckError):
    """The code under review could not be placed on local storage."""
