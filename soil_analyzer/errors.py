"""Exceptions raised by the soil analysis pipeline."""


class SoilAnalysisError(Exception):
    """Base class for request-aborting soil analysis failures."""

    status_code = 500


class ConfigurationError(SoilAnalysisError):
    """Provider credentials or settings are missing."""


class AuthenticationError(SoilAnalysisError):
    """The soil provider rejected or could not process the login."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class SoilDataError(SoilAnalysisError):
    """The soil provider failed outside of individual property fetches."""


class InvalidLocationError(SoilAnalysisError, ValueError):
    """Requested coordinates are outside the valid range."""

    status_code = 400
