"""
Custom exceptions for OnAir operations.

Remote collaborators raise these internally; the public adapter methods turn
the degradable ones into placeholder values, and the orchestrator catches
everything else at the iteration boundary.
"""


class OnAirError(Exception):
    """Base exception for all OnAir errors."""

    pass


class ContentGenerationDegraded(OnAirError):
    """Raised when the text-generation call fails; a placeholder script is used instead."""

    pass


class SynthesisUnavailable(OnAirError):
    """Raised when no audio could be produced for a segment."""

    pass


class CatalogUnavailableError(OnAirError):
    """Raised when the track catalog cannot be reached (transport or HTTP failure)."""

    pass


class CredentialError(CatalogUnavailableError):
    """Raised when a catalog access token cannot be obtained."""

    pass

