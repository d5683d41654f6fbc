"""pst-stream — convert a decoded mail archive into one framed multipart stream."""

from .config import ConverterConfig, LoggingConfig
from .context import ConversionContext
from .converter import ConversionResult, convert
from .errors import (
    ConversionError,
    FatalConversionError,
    RtfDecompressionError,
    StoreError,
    TemplateError,
)
from .framing import EnvelopeWriter
from .logging import setup_logging
from .mime import EmailEncoder
from .store import ItemStore, JsonItemStore
from .walker import Progress, TreeWalker

__all__ = [
    "ConversionContext",
    "ConversionError",
    "ConversionResult",
    "ConverterConfig",
    "EmailEncoder",
    "EnvelopeWriter",
    "FatalConversionError",
    "ItemStore",
    "JsonItemStore",
    "LoggingConfig",
    "Progress",
    "RtfDecompressionError",
    "StoreError",
    "TemplateError",
    "TreeWalker",
    "convert",
    "setup_logging",
]
