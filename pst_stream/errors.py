"""Exception hierarchy for the conversion engine."""

from __future__ import annotations


class ConversionError(Exception):
    """Base class for all conversion errors."""


class FatalConversionError(ConversionError):
    """Stops the conversion: the driver emits the ``error`` part and closes the envelope.

    ``str(exc)`` is the human-readable message placed in the error part.
    """


class StoreError(FatalConversionError):
    """The item store cannot open or index the archive."""


class TemplateError(FatalConversionError):
    """The JSON metadata template lacks the ``FILENAME`` placeholder."""


class RtfDecompressionError(ConversionError):
    """A compressed RTF body is corrupt. Recoverable: the RTF part is omitted."""
