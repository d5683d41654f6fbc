"""Conversion driver: root lookup, tree walk and fatal-error reporting."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

import structlog

from .context import ConversionContext
from .errors import FatalConversionError, StoreError
from .framing import EnvelopeWriter, write_error
from .store import ItemStore
from .walker import Progress, TreeWalker

logger = structlog.get_logger()

OUT_OF_MEMORY = "out of memory because a message was too large"


@dataclass
class ConversionResult:
    """Outcome of one conversion run."""

    emitted: int
    processed: int
    total: int
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _run(store: ItemStore, writer: EnvelopeWriter, context: ConversionContext, progress: Progress) -> None:
    root = store.root()
    root_item = store.load_item(root)
    if root_item is None or not root_item.message_store:
        raise StoreError("Could not get root record")
    logger.info("root_loaded", name=root_item.display_name or "pst")

    top = store.top_of_folders(root, root_item)
    if top is None:
        raise StoreError("Top of folders record not found.")

    progress.total = root_item.folder.item_count if root_item.folder is not None else 0
    walker = TreeWalker(store, writer, context, progress)
    walker.walk(top)


def convert(store: ItemStore, context: ConversionContext, sink: BinaryIO) -> ConversionResult:
    """Stream every item of *store* into *sink*.

    Fatal conditions end up here, and only here: they are written as the
    ``error`` part followed by the closing boundary, and reported through
    :attr:`ConversionResult.error`.  A successful run leaves the envelope
    open.
    """
    progress = Progress()
    error: str | None = None

    try:
        writer = EnvelopeWriter(sink, context.boundary, context.json_template)
        _run(store, writer, context, progress)
    except FatalConversionError as exc:
        error = str(exc)
        logger.error("conversion_failed", error=error, error_type=type(exc).__name__)
    except MemoryError:
        error = OUT_OF_MEMORY
        logger.error("conversion_failed", error=error, error_type="MemoryError")
    except Exception as exc:
        error = f"internal error: {exc}"
        logger.exception("conversion_crashed")

    if error is not None:
        write_error(sink, context.boundary, error)
    else:
        sink.flush()
        logger.info("conversion_finished", emitted=progress.emitted, processed=progress.processed, total=progress.total)

    return ConversionResult(emitted=progress.emitted, processed=progress.processed, total=progress.total, error=error)
