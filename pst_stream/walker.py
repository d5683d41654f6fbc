"""Depth-first traversal of the item tree.

Every leaf item the walker can serialize becomes one ``<index>.json`` /
``<index>.blob`` pair followed by a ``progress`` part.  Folders extend the
item path and never consume an index.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, BinaryIO

import structlog

from pst_schema import ArchiveItem, ItemKind, classify

from .context import ConversionContext
from .framing import EnvelopeWriter
from .ical import write_appointment, write_journal
from .mime import EmailEncoder
from .store import ItemStore
from .vcard import write_vcard

logger = structlog.get_logger()


@dataclass
class Progress:
    """Running counters reported in every ``progress`` part."""

    processed: int = 0
    total: int = 0
    emitted: int = 0

    def offer_total(self, count: int) -> None:
        """Adopt *count* as the total unless one has been set already."""
        if not self.total and count:
            self.total = count


def item_path(path: tuple[str, ...], item_number: int, ext: str) -> str:
    return "/".join((*path, f"{item_number:04d}{ext}"))


class TreeWalker:
    """Walk a store's descriptor tree and stream every item through *writer*."""

    def __init__(
        self,
        store: ItemStore,
        writer: EnvelopeWriter,
        context: ConversionContext,
        progress: Progress | None = None,
        encoder: EmailEncoder | None = None,
    ) -> None:
        self._store = store
        self._writer = writer
        self._context = context
        self.progress = progress if progress is not None else Progress()
        self._encoder = encoder if encoder is not None else EmailEncoder(store, context)

        self._serializers: dict[ItemKind, tuple[str, Callable[[ArchiveItem, BinaryIO], None]]] = {
            ItemKind.CONTACT: (".vcard", self._write_text(write_vcard)),
            ItemKind.EMAIL: (".eml", self._encoder.write_email),
            ItemKind.JOURNAL: (".ics", self._write_text(write_journal)),
            ItemKind.APPOINTMENT: (".ics", self._write_text(write_appointment)),
        }

    @staticmethod
    def _write_text(render: Callable[[ArchiveItem], str]) -> Callable[[ArchiveItem, BinaryIO], None]:
        def write(item: ArchiveItem, out: BinaryIO) -> None:
            out.write(render(item).encode("utf-8"))

        return write

    def walk(self, node: Any, path: tuple[str, ...] = (), index: int = 0) -> int:
        """Emit every item below *node*; return the next free index.

        Item numbers restart at 1 in every folder.
        """
        item_number = 1
        for child in self._store.children(node):
            node_id = self._store.node_id(child)

            if not self._store.has_description(child):
                self._skip(node_id, "missing_description")
                continue
            item = self._store.load_item(child)
            if item is None:
                self._skip(node_id, "unparsable_item")
                continue

            kind = classify(item)
            if kind is ItemKind.FOLDER:
                index = self._enter_folder(child, item, path, index)
                continue

            serializer = self._serializers.get(kind)
            if serializer is None:
                self._skip(node_id, kind.value, item_type=item.item_type.value)
                continue

            ext, write = serializer
            filename = item_path(path, item_number, ext)
            logger.debug("item_emitted", node_id=node_id, kind=kind.value, index=index, path=filename)
            self._writer.write_json(index, filename)
            write(item, self._writer.open_blob(index))
            self.progress.emitted += 1
            self.progress.processed += 1
            self._writer.write_progress(self.progress.processed, self.progress.total)

            item_number += 1
            index += 1
        return index

    def _enter_folder(self, node: Any, item: ArchiveItem, path: tuple[str, ...], index: int) -> int:
        if item.folder is not None:
            self.progress.offer_total(item.folder.item_count)

        if not self._store.children(node):
            return index
        if len(path) >= self._context.max_folder_depth:
            logger.warning(
                "folder_too_deep",
                node_id=self._store.node_id(node),
                depth=len(path) + 1,
                max_depth=self._context.max_folder_depth,
            )
            return index

        logger.debug("folder_entered", name=item.display_name, depth=len(path) + 1)
        return self.walk(node, (*path, item.display_name), index)

    def _skip(self, node_id: object, reason: str, **kw: Any) -> None:
        if reason == ItemKind.MESSAGE_STORE.value:
            logger.info("item_skipped", node_id=node_id, reason=reason, **kw)
        else:
            logger.warning("item_skipped", node_id=node_id, reason=reason, **kw)
        self.progress.processed += 1
