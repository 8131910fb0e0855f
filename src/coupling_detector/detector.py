"""Library entry points: detect coupling in one call, then optionally filter legacy exclusions."""

import threading
from typing import Iterable, Mapping, Optional, Sequence, Union

from coupling_detector.domain.entities import Rule, RuleType, ViolationCollection
from coupling_detector.domain.events import Reporter
from coupling_detector.domain.exclusions import ExclusionSet, ViolationsFilter
from coupling_detector.infrastructure.di.container import CouplingDetectorContainer

ExclusionsLike = Union[ExclusionSet, Mapping[str, Iterable[str]]]


def _as_exclusion_set(exclusions: ExclusionsLike) -> ExclusionSet:
    if isinstance(exclusions, ExclusionSet):
        return exclusions
    return ExclusionSet.from_mapping(exclusions)


def detect(
    root: str,
    subject: str,
    forbidden: Sequence[str],
    *,
    rule_type: RuleType = RuleType.FORBIDDEN,
    exclusions: Optional[ExclusionsLike] = None,
    extension: str = ".php",
    include_inline_references: bool = False,
    reporters: Sequence[Reporter] = (),
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> ViolationCollection:
    """
    Report every file under `subject` that references a symbol under a `forbidden` prefix.

    Raises:
        ConfigurationError: for an empty subject or prefix list.
        SourceRootError: when `root` is missing or unreadable.
        RunCancelledError: when `cancel_event` is set during the run.
    """
    rule = Rule.create(subject, forbidden, rule_type)
    violations_filter = (
        ViolationsFilter(_as_exclusion_set(exclusions)) if exclusions is not None else None
    )
    detector = CouplingDetectorContainer.create_detector(
        extension=extension,
        inline_references=include_inline_references,
        max_workers=max_workers,
        violations_filter=violations_filter,
        reporters=reporters,
        cancel_event=cancel_event,
    )
    return detector.execute(root, [rule]).violations


def filter_violations(violations: ViolationCollection, exclusions: ExclusionsLike) -> ViolationCollection:
    """Drop allowlisted symbols; violations left without any symbol are dropped too."""
    return ViolationsFilter(_as_exclusion_set(exclusions)).filter(violations)
