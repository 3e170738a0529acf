"""Custom exceptions for paper insight extraction."""


class PaperInsightsError(Exception):
    """Base exception for the project."""

    status_code = 500


class InvalidInputError(PaperInsightsError):
    """Raised when the caller supplied missing or malformed input."""

    status_code = 400


class UpstreamUnavailableError(PaperInsightsError):
    """Raised when the remote record service cannot be reached."""

    status_code = 502


class InsufficientContentError(PaperInsightsError):
    """Raised when a remote record has too little usable full text."""

    status_code = 422


class ExtractionFailedError(PaperInsightsError):
    """Raised when the LLM extraction call fails."""

    status_code = 502


class MalformedModelOutputError(PaperInsightsError):
    """Raised when the model reply does not match the result schema."""

    status_code = 502


class ConfigError(PaperInsightsError):
    """Raised when required configuration is missing or invalid."""

    status_code = 500
