"""Item store interface and a JSON-backed implementation.

The binary archive decoder lives outside this package.  The converter
only needs the operations of :class:`ItemStore`: navigate the descriptor
tree, materialize items, resolve embedded messages and read attachment
payloads.  Node handles are opaque to the converter.
"""

from __future__ import annotations

import abc
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from pst_schema import ArchiveDocument, ArchiveItem, Attachment, StoreNode

from .errors import StoreError

logger = structlog.get_logger()


class ItemStore(abc.ABC):
    """Abstract access to a decoded archive."""

    @abc.abstractmethod
    def root(self) -> Any:
        """Return the node of the message-store root record.

        Raises :class:`StoreError` when the archive cannot be opened or indexed.
        """

    @abc.abstractmethod
    def top_of_folders(self, root: Any, root_item: ArchiveItem) -> Any | None:
        """Return the node whose children are the top-level folders, or ``None``."""

    @abc.abstractmethod
    def children(self, node: Any) -> Sequence[Any]:
        """Child nodes of *node*, in store order."""

    @abc.abstractmethod
    def has_description(self, node: Any) -> bool:
        """False when the node's description record cannot be resolved."""

    @abc.abstractmethod
    def load_item(self, node: Any) -> ArchiveItem | None:
        """Materialize the item of *node*; ``None`` when the store cannot parse it."""

    @abc.abstractmethod
    def load_embedded(self, attachment: Attachment) -> ArchiveItem | None:
        """Materialize the message embedded in *attachment*; ``None`` if unparsable."""

    @abc.abstractmethod
    def read_attachment(self, attachment: Attachment) -> bytes | None:
        """Payload of *attachment*: inline data or the referenced blob.

        ``None`` when the payload is neither inline nor resolvable.
        """

    def node_id(self, node: Any) -> object:
        """Identifier of *node* for log records."""
        return id(node)


class JsonItemStore(ItemStore):
    """Item store over a pre-decoded :class:`ArchiveDocument`."""

    def __init__(self, document: ArchiveDocument) -> None:
        self._document = document

    @classmethod
    def from_path(cls, path: str | Path) -> JsonItemStore:
        """Load an archive document, raising :class:`StoreError` if unreadable."""
        try:
            raw = Path(path).read_bytes()
        except OSError as exc:
            raise StoreError("error opening archive") from exc
        return cls.from_json(raw)

    @classmethod
    def from_json(cls, raw: bytes | str) -> JsonItemStore:
        try:
            document = ArchiveDocument.model_validate_json(raw)
        except ValidationError as exc:
            logger.error("archive_document_invalid", errors=exc.error_count())
            raise StoreError("error loading archive index") from exc
        return cls(document)

    def root(self) -> StoreNode:
        return self._document.root

    def top_of_folders(self, root: StoreNode, root_item: ArchiveItem) -> StoreNode | None:
        wanted = self._document.top_of_folders
        if wanted is None:
            return root
        return self._find(root, wanted)

    def _find(self, node: StoreNode, node_id: int) -> StoreNode | None:
        stack = [node]
        while stack:
            current = stack.pop()
            if current.node_id == node_id:
                return current
            stack.extend(reversed(current.children))
        return None

    def children(self, node: StoreNode) -> Sequence[StoreNode]:
        return node.children

    def has_description(self, node: StoreNode) -> bool:
        return node.has_description

    def load_item(self, node: StoreNode) -> ArchiveItem | None:
        return node.item

    def load_embedded(self, attachment: Attachment) -> ArchiveItem | None:
        return attachment.embedded

    def read_attachment(self, attachment: Attachment) -> bytes | None:
        if attachment.data is not None:
            return attachment.data
        if attachment.blob_id is None:
            return None
        return self._document.blobs.get(attachment.blob_id)

    def node_id(self, node: StoreNode) -> int:
        return node.node_id
