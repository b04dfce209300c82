"""Deterministic synthesis of producer results into a prioritized plan."""
from __future__ import annotations

from .buckets import BUCKET_ORDER, Plan, PlanBucketizer
from .crossref import CrossReference, cross_reference, labels_match, normalize
from .drift import DriftDetector, DriftRecord
from .engine import SynthesisResult, synthesize
from .gaps import GapDetector, GapRecord
from .inputs import ProducerOutputs
from .prioritizer import SEVERITY_BASE, Prioritizer, WorkItem, score
from .report import Report, ReportBuilder

__all__ = [
    "BUCKET_ORDER",
    "Plan",
    "PlanBucketizer",
    "CrossReference",
    "cross_reference",
    "labels_match",
    "normalize",
    "DriftDetector",
    "DriftRecord",
    "SynthesisResult",
    "synthesize",
    "GapDetector",
    "GapRecord",
    "ProducerOutputs",
    "SEVERITY_BASE",
    "Prioritizer",
    "WorkItem",
    "score",
    "Report",
    "ReportBuilder",
]
