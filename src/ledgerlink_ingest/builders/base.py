"""Base record builder and registry."""

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from ledgerlink_ingest.logging_setup import get_logger
from ledgerlink_ingest.models import Batch, Ledger, Source


class RecordBuilder(ABC):
    """Abstract base class for turning raw input into a Batch."""

    # Set by each subclass
    source: ClassVar[Source]

    def __init__(
        self,
        ledger: Ledger | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize builder with an optional ledger side and logger."""
        self.ledger = ledger
        self.log = logger or get_logger(type(self).__module__)

    @abstractmethod
    def build(self, data: Any, option: Any) -> Batch:
        """
        Build a batch from raw input.

        Args:
            data: Raw rows or items for this source
            option: Source-specific setting (date format or contact name)

        Returns:
            Batch with one outcome counted per input row or item
        """
        pass


class BuilderRegistry:
    """Registry mapping each Source to its builder class."""

    _builders: ClassVar[dict[Source, type[RecordBuilder]]] = {}

    @classmethod
    def register(cls, builder_class: type[RecordBuilder]) -> type[RecordBuilder]:
        """
        Register a builder class. Can be used as a decorator.

        Example:
            @BuilderRegistry.register
            class MyBuilder(RecordBuilder):
                source = Source.CSV
        """
        cls._builders[builder_class.source] = builder_class
        return builder_class

    @classmethod
    def get_builder(
        cls,
        source: Source | str,
        ledger: Ledger | None = None,
        logger: logging.Logger | None = None,
    ) -> RecordBuilder:
        """
        Get a builder instance for the given source.

        Raises:
            KeyError: If no builder is registered for the source
        """
        builder_class = cls._builders[Source(source)]
        return builder_class(ledger=ledger, logger=logger)
