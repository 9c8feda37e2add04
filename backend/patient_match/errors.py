"""Exception types raised outside the validation core."""

from __future__ import annotations


class PatientMatchError(Exception):
    """Base class for patient-match errors."""


class MalformedInputError(PatientMatchError):
    """The request body is not a Parameters resource carrying a Patient.

    ``fatal`` marks failures where the body could not be parsed at all (as
    opposed to a well-formed resource with the wrong shape).
    """

    def __init__(self, message: str, fatal: bool = False) -> None:
        super().__init__(message)
        self.message = message
        self.fatal = fatal


class ConfigurationError(PatientMatchError):
    """A configuration value is present but invalid."""
