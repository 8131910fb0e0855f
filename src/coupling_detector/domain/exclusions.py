"""Legacy exclusions: exact symbols allowed to break a subject namespace's rules."""

import dataclasses
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Optional

from coupling_detector.domain.entities import QualifiedName, Violation, ViolationCollection


@dataclass(frozen=True)
class ExclusionSet:
    """Subject namespace -> exact fully-qualified symbols exempt from violations."""

    entries: Mapping[QualifiedName, frozenset[QualifiedName]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def __hash__(self) -> int:
        return hash(frozenset(self.entries.items()))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Iterable[str]]) -> "ExclusionSet":
        """Build from plain data, e.g. ``{"Akeneo/Component": ["Pim/Bundle/X"]}``."""
        entries: dict[QualifiedName, frozenset[QualifiedName]] = {}
        for subject, symbols in data.items():
            key = QualifiedName.parse(subject)
            parsed = frozenset(QualifiedName.parse(symbol) for symbol in symbols)
            entries[key] = entries.get(key, frozenset()) | parsed
        return cls(entries=entries)

    def for_subject(self, subject: QualifiedName) -> frozenset[QualifiedName]:
        return self.entries.get(subject, frozenset())

    def is_excluded(self, subject: QualifiedName, symbol: QualifiedName) -> bool:
        return symbol in self.for_subject(subject)

    def __len__(self) -> int:
        return sum(len(symbols) for symbols in self.entries.values())


class ViolationsFilter:
    """Remove allowlisted token violations. Exact match only, no prefix semantics."""

    def __init__(self, exclusions: ExclusionSet) -> None:
        self.exclusions = exclusions

    def filter_violation(self, violation: Violation) -> Optional[Violation]:
        """Return the violation without excluded tokens, or None when nothing is left."""
        subject = violation.rule.subject
        kept = tuple(
            token
            for token in violation.token_violations
            if not self.exclusions.is_excluded(subject, token.symbol)
        )
        if not kept:
            return None
        if len(kept) == len(violation.token_violations):
            return violation
        return dataclasses.replace(violation, token_violations=kept)

    def filter(self, violations: ViolationCollection) -> ViolationCollection:
        """Return a new collection; the input is left untouched."""
        filtered = ViolationCollection(skipped=violations.skipped)
        for violation in violations:
            kept = self.filter_violation(violation)
            if kept is not None:
                filtered.add(kept)
        return filtered
