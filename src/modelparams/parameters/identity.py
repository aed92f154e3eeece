"""Hierarchical identities for model objects.

An ObjectId is the path from the root of a model-object tree down to one
object. Each segment is a name plus an optional index (used when a parent
holds several children of the same kind, e.g. household types).
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

IdSegment = Tuple[str, Optional[int]]


@dataclass(frozen=True)
class ObjectId:
    """Immutable path identifying one model object within a tree.

    Two ids are equal iff their segment sequences are equal element-wise.

    Attributes:
        segments: Ordered (name, index) pairs from the root down

    Example:
        >>> root = ObjectId.root("model")
        >>> hh = root.child("household", 2)
        >>> str(hh.child("utility"))
        'model > household[2] > utility'
    """
    segments: Tuple[IdSegment, ...]

    def __post_init__(self):
        """Validate and freeze the segment sequence."""
        segments = tuple((str(name), index) for name, index in self.segments)
        if not segments:
            raise ValueError("ObjectId needs at least one segment")
        for name, index in segments:
            if not name:
                raise ValueError("ObjectId segment names cannot be empty")
            if index is not None and (isinstance(index, bool) or not isinstance(index, int)):
                raise TypeError(f"ObjectId index must be int or None, got {type(index).__name__}")
        object.__setattr__(self, 'segments', segments)

    @classmethod
    def root(cls, name: str, index: Optional[int] = None) -> "ObjectId":
        """Create the id of a top-level object."""
        return cls(((name, index),))

    @classmethod
    def from_segments(cls, segments: Iterable[IdSegment]) -> "ObjectId":
        """Create an id from any iterable of (name, index) pairs."""
        return cls(tuple(segments))

    def child(self, name: str, index: Optional[int] = None) -> "ObjectId":
        """Return the id of a child object one level below this one."""
        return ObjectId(self.segments + ((name, index),))

    @property
    def name(self) -> str:
        """Name of the object's own (last) segment."""
        return self.segments[-1][0]

    @property
    def index(self) -> Optional[int]:
        """Index of the object's own (last) segment."""
        return self.segments[-1][1]

    @property
    def parent(self) -> Optional["ObjectId"]:
        """Id of the parent object, or None for a root."""
        if len(self.segments) == 1:
            return None
        return ObjectId(self.segments[:-1])

    @property
    def depth(self) -> int:
        """Number of segments (1 for a root)."""
        return len(self.segments)

    def is_descendant_of(self, other: "ObjectId") -> bool:
        """True if other is a strict prefix of this id."""
        n = len(other.segments)
        return n < len(self.segments) and self.segments[:n] == other.segments

    def __str__(self) -> str:
        parts = []
        for name, index in self.segments:
            parts.append(name if index is None else f"{name}[{index}]")
        return " > ".join(parts)
