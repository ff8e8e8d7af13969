"""Domain exceptions for the atom catalog.

This module contains the exception hierarchy shared by the collection store,
the merge engine and the remote store implementations.
"""

from typing import List, Optional


class AtomStoreError(Exception):
    """Base exception for atom catalog errors."""

    pass


class RemoteError(AtomStoreError):
    """Exception raised when a call to the remote store fails.

    Attributes:
        collection (Optional[str]): Remote collection the call targeted.
        operation (Optional[str]): Store operation that failed (select, insert, ...).
    """

    def __init__(
        self,
        message: str,
        collection: Optional[str] = None,
        operation: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.collection = collection
        self.operation = operation


class PersistenceError(RemoteError):
    """Exception raised when a primary entity write fails in the store.

    Local state is left exactly as it was before the failed write.
    """

    pass


class PartialConsistencyError(AtomStoreError):
    """Exception raised when a multi-step operation fails part way.

    Completed steps are not rolled back. Every multi-step operation is
    idempotent, so re-running it is the recovery path.

    Attributes:
        completed (List[str]): Descriptions of the steps that committed.
    """

    def __init__(self, message: str, completed: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.completed = list(completed or [])


class ValidationError(AtomStoreError, ValueError):
    """Exception raised for malformed requests, before any remote call."""

    pass


class EntityNotFoundError(AtomStoreError):
    """Exception raised when a referenced entity is not in the collection."""

    pass
