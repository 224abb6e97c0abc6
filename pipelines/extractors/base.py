"""
Base Extractor

Abstract base class for data extractors.
"""

from abc import ABC, abstractmethod
from typing import Any

from core.logging import get_logger


class BaseExtractor(ABC):
    """
    Abstract base class for data extractors.

    Extractors fetch raw data from an external source and leave shaping to
    the transformers. Retryable failures surface as core.resilience errors
    so the retry decorator and circuit breaker can act on them.
    """

    def __init__(self, name: str):
        self.name = name
        self.log = get_logger(f"extractor.{name}")

    @abstractmethod
    def extract(self, **kwargs: Any) -> Any:
        """
        Extract data from the source.

        Raises:
            NetworkError, RateLimitError, etc. for retryable failures
        """
        pass
