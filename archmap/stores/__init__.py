"""In-memory caches shared across scans and summaries."""

from .digest_cache import DigestCache
from .summary_cache import SummaryCache

__all__ = ["DigestCache", "SummaryCache"]
