"""Immutable per-run conversion context passed to every component."""

from __future__ import annotations

import random
from dataclasses import dataclass, field

from .config import ConverterConfig


@dataclass(frozen=True)
class ConversionContext:
    """Envelope settings, randomness source and recursion limits of one run.

    ``rng`` drives MIME boundaries and generated attachment names; a fixed
    seed makes the document structure repeatable.
    """

    boundary: str
    json_template: str
    rng: random.Random = field(default_factory=random.Random)
    max_embedding_depth: int = 16
    max_folder_depth: int = 256

    @classmethod
    def from_config(cls, config: ConverterConfig) -> ConversionContext:
        return cls(
            boundary=config.boundary,
            json_template=config.json_template,
            rng=random.Random(config.seed),
            max_embedding_depth=config.max_embedding_depth,
            max_folder_depth=config.max_folder_depth,
        )
