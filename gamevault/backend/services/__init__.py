"""Domain services for accounts, the game catalog and wishlists."""

from .results import ErrorKind, ServiceResult

__all__ = ["ErrorKind", "ServiceResult"]
