"""Port for the shared record store ("the cache")."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable

    from reviewflow.domain.model import ContentRecord


@runtime_checkable
class RecordStore(Protocol):
    """Single authoritative collection of records keyed by id.

    Readers see every write immediately. Only the mutation coordinator writes
    workflow changes through :meth:`put`.
    """

    def get(self, record_id: str) -> ContentRecord | None: ...

    def put(self, record: ContentRecord) -> None: ...

    def ids(self) -> Iterable[str]: ...

    def __contains__(self, record_id: object) -> bool: ...
