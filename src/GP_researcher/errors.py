"""Exceptions raised by GP Researcher."""


class GPResearcherError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(GPResearcherError):
    """The program cannot start with the given settings."""


class InsufficientDataError(GPResearcherError):
    """Too few complete observations to run an analysis."""
