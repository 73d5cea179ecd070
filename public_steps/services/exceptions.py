"""
Service Layer Exceptions

Custom exceptions for the public steps services and the duplication engine.
Any of them aborts the surrounding transaction.
"""


class PublicStepsError(Exception):
    """Base class for errors raised by the public steps services."""
    pass


class NotFound(PublicStepsError):
    """Raised when a group or a referenced step does not exist."""
    pass


class InconsistentTree(PublicStepsError):
    """
    Raised when a step tree breaks its invariants: a step whose parent
    was not cloned before it, or a cycle in the parent chain.
    """
    pass


class StoreFailure(PublicStepsError):
    """Raised when an underlying persistence operation fails."""
    pass
