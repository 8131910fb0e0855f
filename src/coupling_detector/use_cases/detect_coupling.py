"""Use Case: Detect Coupling - scan, parse, check rules and aggregate violations."""

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from coupling_detector.domain.entities import Node, Rule, Summary, ViolationCollection
from coupling_detector.domain.errors import ConfigurationError, NodeParseError, RunCancelledError
from coupling_detector.domain.events import (
    EventDispatcher,
    NodeChecked,
    NodeParsed,
    NodeSkipped,
    NodesParsed,
    RuleChecked,
    RulesCheckStarted,
    RunChecked,
    RunStarted,
)
from coupling_detector.domain.exclusions import ViolationsFilter
from coupling_detector.domain.protocols import NodeParserProtocol, SourceScannerFactoryProtocol
from coupling_detector.domain.rules import RuleMatcher

logger = logging.getLogger(__name__)


def default_max_workers() -> int:
    return min(8, os.cpu_count() or 1)


@dataclass(frozen=True)
class RunResult:
    """Everything a run produced. Only built for runs that completed."""

    violations: ViolationCollection
    summary: Summary
    nodes: tuple[Node, ...]
    skipped: tuple[str, ...]


class DetectCouplingUseCase:
    """Run rules over the source files of their subject namespaces."""

    def __init__(
        self,
        parser: NodeParserProtocol,
        scanner_factory: SourceScannerFactoryProtocol,
        dispatcher: Optional[EventDispatcher] = None,
        matcher: Optional[RuleMatcher] = None,
        violations_filter: Optional[ViolationsFilter] = None,
        max_workers: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        self.parser = parser
        self.scanner_factory = scanner_factory
        self.dispatcher = dispatcher or EventDispatcher()
        self.matcher = matcher or RuleMatcher()
        self.violations_filter = violations_filter
        self.max_workers = max_workers or default_max_workers()
        self.cancel_event = cancel_event

    def _checkpoint(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise RunCancelledError("Coupling detection run was cancelled.")

    def collect_files(self, root: str, rules: Sequence[Rule]) -> list[str]:
        """Union of the files of every rule subject, sorted. Raises SourceRootError."""
        subjects = sorted({str(rule.subject) for rule in rules})
        files: set[str] = set()
        for subject in subjects:
            files.update(self.scanner_factory(root, subject))
        return sorted(files)

    def execute(self, root: str, rules: Sequence[Rule]) -> RunResult:
        """
        Execute one detection run.

        Raises:
            ConfigurationError: when no rule is given.
            SourceRootError: when the root cannot be scanned.
            RunCancelledError: when the cancel event is set between files or rules.
        """
        if not rules:
            raise ConfigurationError("At least one rule is required.")
        files = self.collect_files(root, rules)
        logger.debug("Found %d source files under %s", len(files), root)

        self._checkpoint()
        self.dispatcher.run_started(RunStarted(expected_node_count=len(files), rules=tuple(rules)))
        nodes, skipped = self._parse_all(files)
        self.dispatcher.nodes_parsed(NodesParsed(nodes=nodes, skipped=skipped))

        collection = self._check_rules(nodes, rules, skipped)
        summary = collection.summary()
        self.dispatcher.run_checked(RunChecked(summary=summary, violations=tuple(collection)))
        return RunResult(violations=collection, summary=summary, nodes=nodes, skipped=skipped)

    def _parse_one(self, file_path: str) -> Union[Node, NodeParseError]:
        try:
            return self.parser.parse(file_path)
        except NodeParseError as exc:
            return exc

    def _parse_all(self, files: list[str]) -> tuple[tuple[Node, ...], tuple[str, ...]]:
        outcomes: dict[str, Union[Node, NodeParseError]] = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {executor.submit(self._parse_one, path): path for path in files}
            try:
                for future in as_completed(futures):
                    self._checkpoint()
                    outcomes[futures[future]] = future.result()
            except RunCancelledError:
                for future in futures:
                    future.cancel()
                raise

        nodes: list[Node] = []
        skipped: list[str] = []
        for path in sorted(outcomes):
            outcome = outcomes[path]
            if isinstance(outcome, NodeParseError):
                logger.warning("Skipping %s: %s", path, outcome.reason)
                skipped.append(path)
                self.dispatcher.node_skipped(NodeSkipped(file_path=path, reason=outcome.reason))
            else:
                nodes.append(outcome)
                self.dispatcher.node_parsed(NodeParsed(node=outcome))
        return tuple(nodes), tuple(skipped)

    def _check_rules(
        self, nodes: tuple[Node, ...], rules: Sequence[Rule], skipped: tuple[str, ...] = ()
    ) -> ViolationCollection:
        collection = ViolationCollection(skipped=skipped)
        self.dispatcher.rules_check_started(RulesCheckStarted(rule_count=len(rules)))
        for rule in rules:
            self._checkpoint()
            produced = []
            for node in nodes:
                violation = self.matcher.check(node, rule)
                if violation is not None and self.violations_filter is not None:
                    violation = self.violations_filter.filter_violation(violation)
                self.dispatcher.node_checked(NodeChecked(node=node, rule=rule, violation=violation))
                if violation is not None:
                    produced.append(violation)
            logger.debug("Rule %s: %d violation(s)", rule, len(produced))
            collection.extend(produced)
            self.dispatcher.rule_checked(RuleChecked(rule=rule, violations=tuple(produced)))
        return collection
