"""
Data Extractors

Reusable components for fetching data from external sources.
"""

from pipelines.extractors.base import BaseExtractor
from pipelines.extractors.nba_api import NBAApiExtractor

__all__ = [
    "BaseExtractor",
    "NBAApiExtractor",
]
