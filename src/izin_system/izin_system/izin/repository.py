from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import IzinStatus
from .model import IzinApplication


class IzinRepository(Protocol):
    """Persistence collaborator for izin applications.

    Failures are raised as ``PersistenceError`` subclasses (``NotFoundError``,
    ``ConflictError``, ``StorageError``), never as domain errors.
    """

    def insert(self, record: IzinApplication) -> str:
        """Store a new record and return its id."""

        raise NotImplementedError

    def load_by_id(self, izin_id: str) -> IzinApplication:
        """Raise ``NotFoundError`` when the record does not exist."""

        raise NotImplementedError

    def save(self, record: IzinApplication, *, expected_version: int) -> int:
        """Overwrite the record only if its stored version is ``expected_version``.

        Returns the new version; raises ``ConflictError`` when another writer
        got there first.
        """

        raise NotImplementedError

    def delete(self, izin_id: str, *, expected_version: int) -> None:
        raise NotImplementedError

    def query_by_status(self, status: IzinStatus, *, limit: Optional[int] = None) -> Sequence[IzinApplication]:
        raise NotImplementedError

    def query_by_date_range(self, start: datetime, end: datetime) -> Sequence[IzinApplication]:
        """Records created, or departing, within ``[start, end]``."""

        raise NotImplementedError

    def query_by_santri(self, santri_id: str) -> Sequence[IzinApplication]:
        raise NotImplementedError
