"""Engine components chaining fetch → extract → normalize → reconcile."""

from .dates import parse_deadline
from .extraction import ExtractionPipeline, ExtractionResult, RawCandidate
from .fetcher import FetchResponse, Fetcher
from .fingerprint import fingerprint_of, make_fingerprint
from .normalizer import FieldNormalizer
from .reconciler import ReconcileOutcome, Reconciler

__all__ = [
    "ExtractionPipeline",
    "ExtractionResult",
    "FetchResponse",
    "Fetcher",
    "FieldNormalizer",
    "RawCandidate",
    "ReconcileOutcome",
    "Reconciler",
    "fingerprint_of",
    "make_fingerprint",
    "parse_deadline",
]
