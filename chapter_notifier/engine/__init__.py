"""Engine components orchestrating fetch → parse → extract → filter → dedup."""

from .dedup import DedupStore
from .extractor import ExtractionError, RecordExtractor, ReleaseRecord, TimestampFormatError
from .fetcher import FetchError, FetchResponse, Fetcher
from .parser import CandidateBlock, Parser
from .watch import WatchFilter

__all__ = [
    "CandidateBlock",
    "DedupStore",
    "ExtractionError",
    "FetchError",
    "FetchResponse",
    "Fetcher",
    "Parser",
    "RecordExtractor",
    "ReleaseRecord",
    "TimestampFormatError",
    "WatchFilter",
]
