"""Locate the ParamVector of a specific object inside a larger assembly."""

from typing import Iterable, Iterator, List, Optional, Tuple

from ..constants import NOT_FOUND
from .identity import ObjectId
from .registry import ParamVector


class PvectorLocator:
    """Ordered (ObjectId, ParamVector) pairs collected by a tree walk.

    Lookups compare full identities and return the first match. A miss is
    an ordinary outcome, reported through the NOT_FOUND sentinel.
    """

    def __init__(self, entries: Optional[Iterable[Tuple[ObjectId, ParamVector]]] = None):
        self._entries: List[Tuple[ObjectId, ParamVector]] = []
        for obj_id, pvec in entries or []:
            self.append(obj_id, pvec)

    def append(self, obj_id: ObjectId, pvec: ParamVector) -> None:
        """Add an entry at the end."""
        self._entries.append((obj_id, pvec))

    def find(self, obj_id: ObjectId) -> Tuple[int, Optional[ParamVector]]:
        """Find the ParamVector registered for obj_id.

        Returns:
            (index, pvec) for the first match, otherwise (NOT_FOUND, None)
        """
        for i, (entry_id, pvec) in enumerate(self._entries):
            if entry_id == obj_id:
                return i, pvec
        return NOT_FOUND, None

    def ids(self) -> List[ObjectId]:
        """Identities in collection order."""
        return [obj_id for obj_id, _ in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Tuple[ObjectId, ParamVector]]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"PvectorLocator({len(self._entries)} entries)"
