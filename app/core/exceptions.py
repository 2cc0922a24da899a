"""Custom exceptions for the Invoice Tracker application."""


class InvoiceTrackerError(Exception):
    """Base exception for Invoice Tracker application."""

    pass


class ValidationError(InvoiceTrackerError):
    """Raised when validation fails."""

    pass


class NotFoundError(InvoiceTrackerError):
    """Raised when a resource is not found."""

    pass


class ExtractionError(InvoiceTrackerError):
    """Raised when a PDF cannot be turned into text."""

    pass


class ConfigurationError(InvoiceTrackerError):
    """Raised when configuration is invalid."""

    pass
