"""Domain entities: nodes, rules, violations and their aggregation."""

import re
import threading
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Optional

from coupling_detector.domain.errors import ConfigurationError

_SEPARATORS = re.compile(r"[\\/]+")


@dataclass(frozen=True, order=True)
class QualifiedName:
    """
    A namespace or fully-qualified symbol as an ordered tuple of segments.

    Text may use either ``\\`` (PHP) or ``/`` (path-like, as in configuration
    keys) as separator. Rendering always uses the PHP form.
    """

    segments: tuple[str, ...] = ()

    @classmethod
    def parse(cls, text: str) -> "QualifiedName":
        """Split text on either separator, dropping leading/trailing separators."""
        return cls(tuple(part for part in _SEPARATORS.split(text.strip()) if part))

    def is_under(self, prefix: "QualifiedName") -> bool:
        """Component-wise prefix test: ``Acme\\ComponentX`` is not under ``Acme\\Component``."""
        size = len(prefix.segments)
        return self.segments[:size] == prefix.segments

    def is_empty(self) -> bool:
        return not self.segments

    def __str__(self) -> str:
        return "\\".join(self.segments)


@dataclass(frozen=True, order=True)
class Location:
    """1-based line and column of a reference in its file."""

    line: int
    column: int


@dataclass(frozen=True)
class Reference:
    """A fully-qualified symbol referenced by a file, with its source location."""

    symbol: QualifiedName
    location: Location


@dataclass(frozen=True)
class Node:
    """A parsed source file: its declared namespace and the references it makes, in file order."""

    file_path: str
    declared_namespace: QualifiedName = field(default_factory=QualifiedName)
    references: tuple[Reference, ...] = ()


class RuleType(str, Enum):
    """Discriminator of the rule semantics."""

    FORBIDDEN = "forbidden-use"
    DISCOURAGED = "discouraged-use"
    ONLY = "only-use"


class ViolationType(Enum):
    """Severity of a violation."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Rule:
    """
    A layering rule evaluated against every node of a run.

    ``prefixes`` are forbidden (or discouraged) namespaces for the
    ``forbidden-use`` and ``discouraged-use`` types, and the only allowed
    namespaces for ``only-use``.
    """

    subject: QualifiedName
    prefixes: tuple[QualifiedName, ...]
    type: RuleType = RuleType.FORBIDDEN

    def __post_init__(self) -> None:
        if self.subject.is_empty():
            raise ConfigurationError("Rule subject namespace must not be empty.")
        if not self.prefixes:
            raise ConfigurationError(f"Rule for '{self.subject}' declares no namespaces.")
        if any(prefix.is_empty() for prefix in self.prefixes):
            raise ConfigurationError(f"Rule for '{self.subject}' contains an empty namespace.")

    @classmethod
    def create(
        cls,
        subject: str,
        prefixes: Iterable[str],
        rule_type: RuleType = RuleType.FORBIDDEN,
    ) -> "Rule":
        """Build a rule from plain strings."""
        return cls(
            subject=QualifiedName.parse(subject),
            prefixes=tuple(QualifiedName.parse(prefix) for prefix in prefixes),
            type=rule_type,
        )

    @property
    def violation_type(self) -> ViolationType:
        if self.type is RuleType.DISCOURAGED:
            return ViolationType.WARNING
        return ViolationType.ERROR

    def sort_key(self) -> tuple[str, str, tuple[str, ...]]:
        return (str(self.subject), self.type.value, tuple(str(p) for p in self.prefixes))

    def __str__(self) -> str:
        prefixes = ", ".join(str(p) for p in self.prefixes)
        return f"{self.subject} [{self.type.value}: {prefixes}]"


@dataclass(frozen=True)
class TokenViolation:
    """One reference site breaking a rule."""

    symbol: QualifiedName
    location: Location


@dataclass(frozen=True)
class Violation:
    """All the references of one node that break one rule."""

    node: Node
    rule: Rule
    token_violations: tuple[TokenViolation, ...]
    type: ViolationType = ViolationType.ERROR

    def __post_init__(self) -> None:
        if not self.token_violations:
            raise ValueError("A violation requires at least one token violation.")

    def sort_key(self) -> tuple[object, ...]:
        sites = tuple((t.location, str(t.symbol)) for t in self.token_violations)
        return (self.node.file_path, self.rule.sort_key(), sites)


@dataclass(frozen=True)
class Summary:
    """Deterministic digest of a run, ready for presentation layers."""

    total_count: int
    violation_count: int
    violating_nodes: tuple[str, ...]
    violating_rules: tuple[Rule, ...]
    forbidden_uses: tuple[tuple[str, int], ...]
    skipped_count: int = 0

    def has_violations(self) -> bool:
        return self.total_count > 0

    def forbidden_uses_dict(self) -> dict[str, int]:
        """Symbol -> count, preserving the sorted order."""
        return dict(self.forbidden_uses)


class ViolationCollection:
    """
    Accumulates violations across a run.

    The collection is the only point of shared mutation in a run, so updates
    are serialized. Every read returns data in a canonical order that does not
    depend on the order violations were added. Paths of files skipped during
    the run travel with the collection so every summary reports them.
    """

    def __init__(
        self,
        violations: Optional[Iterable[Violation]] = None,
        skipped: Iterable[str] = (),
    ) -> None:
        self._lock = threading.Lock()
        self._violations: list[Violation] = []
        self.skipped: tuple[str, ...] = tuple(sorted(skipped))
        if violations is not None:
            self.extend(violations)

    def add(self, violation: Violation) -> None:
        with self._lock:
            self._violations.append(violation)

    def extend(self, violations: Iterable[Violation]) -> None:
        items = list(violations)
        with self._lock:
            self._violations.extend(items)

    def _snapshot(self) -> list[Violation]:
        with self._lock:
            return sorted(self._violations, key=Violation.sort_key)

    def __iter__(self) -> Iterator[Violation]:
        return iter(self._snapshot())

    def __len__(self) -> int:
        with self._lock:
            return len(self._violations)

    def __bool__(self) -> bool:
        return len(self) > 0

    def total_count(self) -> int:
        """Number of offending reference sites (one per token violation)."""
        return sum(len(v.token_violations) for v in self._snapshot())

    def distinct_violating_nodes(self) -> tuple[str, ...]:
        return tuple(sorted({v.node.file_path for v in self._snapshot()}))

    def distinct_violating_rules(self) -> tuple[Rule, ...]:
        rules = {v.rule for v in self._snapshot()}
        return tuple(sorted(rules, key=Rule.sort_key))

    def sorted_forbidden_uses(self) -> list[tuple[str, int]]:
        """Symbol occurrence counts, by count descending then symbol ascending."""
        counter: Counter[str] = Counter()
        for violation in self._snapshot():
            for token in violation.token_violations:
                counter[str(token.symbol)] += 1
        return sorted(counter.items(), key=lambda item: (-item[1], item[0]))

    def summary(self, skipped: Optional[int] = None) -> Summary:
        """Digest of the collection; the skip count defaults to the recorded skipped paths."""
        return Summary(
            total_count=self.total_count(),
            violation_count=len(self),
            violating_nodes=self.distinct_violating_nodes(),
            violating_rules=self.distinct_violating_rules(),
            forbidden_uses=tuple(self.sorted_forbidden_uses()),
            skipped_count=len(self.skipped) if skipped is None else skipped,
        )
