"""Lifecycle events emitted by a detection run and the reporter contract consuming them.

Events carry data only; rendering belongs to reporters. Per run the order is:
run_started, node_parsed/node_skipped (by file path), nodes_parsed,
rules_check_started, node_checked (per node per rule), rule_checked (per rule),
run_checked.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from coupling_detector.domain.entities import Node, Rule, Summary, Violation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunStarted:
    expected_node_count: int
    rules: tuple[Rule, ...]


@dataclass(frozen=True)
class NodeParsed:
    node: Node


@dataclass(frozen=True)
class NodeSkipped:
    file_path: str
    reason: str


@dataclass(frozen=True)
class NodesParsed:
    nodes: tuple[Node, ...]
    skipped: tuple[str, ...]


@dataclass(frozen=True)
class RulesCheckStarted:
    rule_count: int


@dataclass(frozen=True)
class NodeChecked:
    node: Node
    rule: Rule
    violation: Optional[Violation]


@dataclass(frozen=True)
class RuleChecked:
    rule: Rule
    violations: tuple[Violation, ...]


@dataclass(frozen=True)
class RunChecked:
    summary: Summary
    violations: tuple[Violation, ...]


class Reporter(Protocol):
    """Passive observer of a run. Handlers must be synchronous and must not mutate payloads."""

    def run_started(self, event: RunStarted) -> None: ...
    def node_parsed(self, event: NodeParsed) -> None: ...
    def node_skipped(self, event: NodeSkipped) -> None: ...
    def nodes_parsed(self, event: NodesParsed) -> None: ...
    def rules_check_started(self, event: RulesCheckStarted) -> None: ...
    def node_checked(self, event: NodeChecked) -> None: ...
    def rule_checked(self, event: RuleChecked) -> None: ...
    def run_checked(self, event: RunChecked) -> None: ...


class BaseReporter:
    """No-op reporter; subclasses override the signals they care about."""

    def run_started(self, event: RunStarted) -> None:
        pass

    def node_parsed(self, event: NodeParsed) -> None:
        pass

    def node_skipped(self, event: NodeSkipped) -> None:
        pass

    def nodes_parsed(self, event: NodesParsed) -> None:
        pass

    def rules_check_started(self, event: RulesCheckStarted) -> None:
        pass

    def node_checked(self, event: NodeChecked) -> None:
        pass

    def rule_checked(self, event: RuleChecked) -> None:
        pass

    def run_checked(self, event: RunChecked) -> None:
        pass


class EventDispatcher:
    """Fan lifecycle events out to every subscribed reporter, in subscription order."""

    def __init__(self, reporters: Optional[list[Reporter]] = None) -> None:
        self._reporters: list[Reporter] = list(reporters or [])

    def subscribe(self, reporter: Reporter) -> None:
        self._reporters.append(reporter)

    @property
    def reporters(self) -> tuple[Reporter, ...]:
        return tuple(self._reporters)

    def _emit(self, signal: str, event: object) -> None:
        logger.debug("Dispatching %s", signal)
        for reporter in self._reporters:
            getattr(reporter, signal)(event)

    def run_started(self, event: RunStarted) -> None:
        self._emit("run_started", event)

    def node_parsed(self, event: NodeParsed) -> None:
        self._emit("node_parsed", event)

    def node_skipped(self, event: NodeSkipped) -> None:
        self._emit("node_skipped", event)

    def nodes_parsed(self, event: NodesParsed) -> None:
        self._emit("nodes_parsed", event)

    def rules_check_started(self, event: RulesCheckStarted) -> None:
        self._emit("rules_check_started", event)

    def node_checked(self, event: NodeChecked) -> None:
        self._emit("node_checked", event)

    def rule_checked(self, event: RuleChecked) -> None:
        self._emit("rule_checked", event)

    def run_checked(self, event: RunChecked) -> None:
        self._emit("run_checked", event)
