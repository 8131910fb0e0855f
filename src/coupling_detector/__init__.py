"""Detect forbidden dependencies between namespaces of a source tree."""

from coupling_detector.detector import detect, filter_violations
from coupling_detector.domain.entities import (
    Location,
    Node,
    QualifiedName,
    Reference,
    Rule,
    RuleType,
    Summary,
    TokenViolation,
    Violation,
    ViolationCollection,
    ViolationType,
)
from coupling_detector.domain.errors import (
    ConfigurationError,
    CouplingDetectorError,
    NodeParseError,
    RunCancelledError,
    SourceRootError,
)
from coupling_detector.domain.exclusions import ExclusionSet, ViolationsFilter

__all__ = [
    "ConfigurationError",
    "CouplingDetectorError",
    "ExclusionSet",
    "Location",
    "Node",
    "NodeParseError",
    "QualifiedName",
    "Reference",
    "Rule",
    "RuleType",
    "RunCancelledError",
    "SourceRootError",
    "Summary",
    "TokenViolation",
    "Violation",
    "ViolationCollection",
    "ViolationType",
    "ViolationsFilter",
    "detect",
    "filter_violations",
]
