"""Chunkwright Chunk Domain Model - A bounded content unit plus its vector.

This module contains the Chunk domain model which represents one unit of text
produced by a segmentation run. The Chunk model encapsulates the content, the
vector stamped on it, its position in the source text and free-form metadata.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from ..types import ChunkId, ChunkType, DocumentId, CharOffset
from ..exceptions import ValidationError
from .vector import Vector


@dataclass(frozen=True)
class Chunk:
    """Domain model representing one segmented chunk of text.

    This immutable model is created once by a segmentation run. The only
    transformation applied afterwards is vector normalization, which the
    similarity store performs on a copy at insertion time.

    Attributes:
        id: Opaque unique chunk identifier
        content: Chunk text, equal to ``source[start_position:end_position]``
        vector: Vector attached to the content
        metadata: Free-form metadata (caller metadata plus run details)
        chunk_index: Position of the chunk within its segmentation run
        start_position: Starting character offset in the source text
        end_position: Ending character offset (exclusive)
        document_id: Optional originating document identifier
        chunk_type: Kind of content unit
    """

    id: ChunkId
    content: str
    vector: Vector
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
    chunk_index: int = 0
    start_position: CharOffset = CharOffset(0)
    end_position: CharOffset = CharOffset(0)
    document_id: Optional[DocumentId] = None
    chunk_type: ChunkType = ChunkType.TEXT

    def __post_init__(self):
        """Validate chunk model after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate chunk model attributes."""
        if not isinstance(self.id, str) or not self.id.strip():
            raise ValidationError("id", self.id, "Chunk id cannot be empty")

        if not isinstance(self.content, str) or not self.content.strip():
            raise ValidationError("content", self.content, "Content cannot be empty")

        if not isinstance(self.vector, Vector):
            raise ValidationError("vector", self.vector, "Vector is required")

        if self.chunk_index < 0:
            raise ValidationError("chunk_index", self.chunk_index, "Chunk index cannot be negative")

        if self.start_position < 0:
            raise ValidationError("start_position", self.start_position, "Start position cannot be negative")

        if self.start_position > self.end_position:
            raise ValidationError(
                "position_range",
                f"{self.start_position}-{self.end_position}",
                "Start position cannot be greater than end position"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Chunk":
        """Create a Chunk model from a dictionary.

        Accepts both the snake_case field names and the camelCase keys used in
        snapshot files (``chunkIndex``, ``startPosition``, ...).

        Args:
            data: Dictionary containing chunk data

        Returns:
            Chunk model created from dictionary data

        Raises:
            ValidationError: If required fields are missing or invalid
        """
        if not isinstance(data, dict):
            raise ValidationError("chunk", data, "Chunk must be a mapping")

        try:
            chunk_id = data.get("id")
            if not chunk_id:
                raise ValidationError("id", chunk_id, "Chunk id is required")

            content = data.get("content")
            if not content:
                raise ValidationError("content", content, "Content is required")

            vector_value = data.get("vector")
            if isinstance(vector_value, Vector):
                vector = vector_value
            elif isinstance(vector_value, dict):
                vector = Vector.from_dict(vector_value)
            elif vector_value is None:
                raise ValidationError("vector", vector_value, "Vector is required")
            else:
                vector = Vector.from_values(vector_value)

            chunk_type_value = data.get("chunk_type", data.get("chunkType"))
            if isinstance(chunk_type_value, ChunkType):
                chunk_type = chunk_type_value
            elif isinstance(chunk_type_value, str):
                chunk_type = ChunkType.from_string(chunk_type_value)
            else:
                chunk_type = ChunkType.TEXT

            document_id = data.get("document_id", data.get("documentId"))

            return cls(
                id=ChunkId(str(chunk_id)),
                content=content,
                vector=vector,
                metadata=dict(data.get("metadata") or {}),
                chunk_index=int(data.get("chunk_index", data.get("chunkIndex", 0)) or 0),
                start_position=CharOffset(int(data.get("start_position", data.get("startPosition", 0)) or 0)),
                end_position=CharOffset(int(data.get("end_position", data.get("endPosition", 0)) or 0)),
                document_id=DocumentId(document_id) if document_id else None,
                chunk_type=chunk_type,
            )

        except (ValueError, TypeError) as e:
            raise ValidationError("data", data, f"Invalid data format: {e}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert Chunk model to its wire (snapshot) dictionary."""
        result = {
            "id": self.id,
            "content": self.content,
            "vector": self.vector.to_dict(),
            "metadata": dict(self.metadata),
            "chunkIndex": self.chunk_index,
            "startPosition": self.start_position,
            "endPosition": self.end_position,
            "chunkType": self.chunk_type.value,
        }

        if self.document_id is not None:
            result["documentId"] = self.document_id

        return result

    @property
    def char_count(self) -> int:
        """Get the number of characters in the content."""
        return len(self.content)

    @property
    def word_count(self) -> int:
        """Get the number of whitespace-delimited words in the content."""
        return len(self.content.split())

    @property
    def span_length(self) -> int:
        """Get the length of the source range this chunk covers."""
        return self.end_position - self.start_position

    def overlaps_with(self, other: "Chunk") -> bool:
        """Check if this chunk's source range overlaps another chunk's."""
        return self.start_position < other.end_position and other.start_position < self.end_position

    def with_vector(self, vector: Vector) -> "Chunk":
        """Create a new Chunk instance carrying a different vector."""
        return replace(self, vector=vector)

    def with_position(self, chunk_index: int, offset: int = 0, chunk_id: Optional[str] = None) -> "Chunk":
        """Create a new Chunk renumbered and shifted by ``offset`` characters.

        Args:
            chunk_index: New chunk index
            offset: Number of characters to add to both positions
            chunk_id: Optional replacement id

        Returns:
            New Chunk instance
        """
        metadata = dict(self.metadata)
        metadata["chunk_index"] = chunk_index
        return replace(
            self,
            id=ChunkId(chunk_id) if chunk_id else self.id,
            chunk_index=chunk_index,
            start_position=CharOffset(self.start_position + offset),
            end_position=CharOffset(self.end_position + offset),
            metadata=metadata,
        )

    def __str__(self) -> str:
        """Return string representation of the chunk."""
        preview = self.content[:40].replace("\n", " ").strip()
        if len(self.content) > 40:
            preview += "..."
        return f"Chunk(id={self.id}, #{self.chunk_index} @ {self.start_position}-{self.end_position}: {preview})"

    def __repr__(self) -> str:
        """Return detailed string representation of the chunk."""
        return (
            f"Chunk(id={self.id!r}, chunk_index={self.chunk_index}, "
            f"positions={self.start_position}-{self.end_position}, "
            f"chars={self.char_count}, type={self.chunk_type.value}, "
            f"dimension={self.vector.dimension})"
        )
