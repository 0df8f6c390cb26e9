"""Root of the Giffy exception hierarchy."""


class GiffyError(Exception):
    """Base class for application specific errors."""


class CleanupError(GiffyError):
    """Raised when a scratch artifact cannot be deleted.

    Only ever logged by the artifact store; it never reaches a caller.
    """


__all__ = ["GiffyError", "CleanupError"]
