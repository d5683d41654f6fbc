"""Entry point: ``python -m pst_stream``.

Reads the archive document named by ``PST_STREAM_INPUT_PATH`` and streams
the converted items to stdout.  Exits with status 1 after a fatal error.
"""

from __future__ import annotations

import sys

import structlog

from .config import ConverterConfig
from .context import ConversionContext
from .converter import convert
from .errors import StoreError
from .framing import write_error
from .logging import setup_logging
from .store import JsonItemStore

logger = structlog.get_logger()


def main() -> None:
    config = ConverterConfig()  # type: ignore[call-arg]
    setup_logging(json=config.logging.json_output, level=config.logging.level)
    sink = sys.stdout.buffer

    try:
        store = JsonItemStore.from_path(config.input_path)
    except StoreError as exc:
        logger.error("archive_open_failed", path=config.input_path, error=str(exc))
        write_error(sink, config.boundary, str(exc))
        sys.exit(1)

    result = convert(store, ConversionContext.from_config(config), sink)
    if not result.ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
