"""Terminal reporters - render lifecycle events and results with rich."""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from coupling_detector.domain.entities import Violation, ViolationType
from coupling_detector.domain.events import (
    BaseReporter,
    NodeChecked,
    NodeParsed,
    NodeSkipped,
    RuleChecked,
    RulesCheckStarted,
    RunChecked,
    RunStarted,
)
from coupling_detector.use_cases.detect_coupling import RunResult
from coupling_detector.use_cases.inspect_namespaces import InspectionReport

PROGRESS_EVERY = 50


class StatisticsReporter(BaseReporter):
    """
    Collects run statistics from lifecycle events.

    Progress counters belong here, never to the detection core. Output is left
    to subclasses.
    """

    def __init__(self) -> None:
        self.node_count = 0
        self.rule_count = 0
        self.parsing_node_iteration = 0
        self.checking_node_iteration = 0
        self.checking_rule_iteration = 0
        self.violations_count = 0
        self.skipped: list[str] = []
        self.nodes_on_error: set[str] = set()
        self.rules_on_error: set[tuple[str, str]] = set()

    def run_started(self, event: RunStarted) -> None:
        self.node_count = event.expected_node_count

    def node_parsed(self, event: NodeParsed) -> None:
        self.parsing_node_iteration += 1

    def node_skipped(self, event: NodeSkipped) -> None:
        self.parsing_node_iteration += 1
        self.skipped.append(event.file_path)

    def rules_check_started(self, event: RulesCheckStarted) -> None:
        self.rule_count = event.rule_count

    def node_checked(self, event: NodeChecked) -> None:
        self.checking_node_iteration += 1
        if event.violation is not None:
            self.nodes_on_error.add(event.node.file_path)

    def rule_checked(self, event: RuleChecked) -> None:
        self.checking_rule_iteration += 1
        self.checking_node_iteration = 0
        if event.violations:
            self.rules_on_error.add((str(event.rule.subject), event.rule.type.value))
            self.violations_count += sum(len(v.token_violations) for v in event.violations)


class DotReporter(StatisticsReporter):
    """Prints a dot per parsed node and per checked rule, then pass/broken totals."""

    def __init__(self, console: Optional[Console] = None) -> None:
        super().__init__()
        self.console = console or Console()

    def _write(self, markup: str) -> None:
        self.console.print(markup, end="", highlight=False)

    def _progress(self, iteration: int, total: int) -> None:
        if iteration % PROGRESS_EVERY != 0:
            return
        width = len(str(total))
        self._write(f" {iteration:>{width}} / {total:>{width}}")
        if iteration != total:
            self._write("\n")

    def run_started(self, event: RunStarted) -> None:
        super().run_started(event)
        self.console.print("Parsing nodes")

    def node_parsed(self, event: NodeParsed) -> None:
        super().node_parsed(event)
        self._write("[green].[/]")
        self._progress(self.parsing_node_iteration, self.node_count)

    def node_skipped(self, event: NodeSkipped) -> None:
        super().node_skipped(event)
        self._write("[yellow]S[/]")
        self._progress(self.parsing_node_iteration, self.node_count)

    def rules_check_started(self, event: RulesCheckStarted) -> None:
        super().rules_check_started(event)
        self.console.print("\n\nChecking rules")

    def rule_checked(self, event: RuleChecked) -> None:
        super().rule_checked(event)
        self._write("[green].[/]" if not event.violations else "[white on red]E[/]")
        self._progress(self.checking_rule_iteration, self.rule_count)

    def run_checked(self, event: RunChecked) -> None:
        broken_rules = len(self.rules_on_error)
        broken_nodes = len(self.nodes_on_error)
        passed_nodes = self.node_count - len(self.skipped) - broken_nodes
        self.console.print("\n")
        self.console.print(
            f"{self.rule_count} rules ([green]{self.rule_count - broken_rules} passed[/], "
            f"[red]{broken_rules} broken[/])",
            highlight=False,
        )
        self.console.print(
            f"{self.node_count} nodes ([green]{passed_nodes} passed[/], "
            f"[red]{broken_nodes} broken[/])",
            highlight=False,
        )
        if self.skipped:
            self.console.print(f"[yellow]{len(self.skipped)} nodes skipped[/]", highlight=False)
        self.console.print()
        if self.violations_count == 0:
            self.console.print("[black on green]No coupling issues found ✔[/]")
        else:
            self.console.print(f"[white on red]{self.violations_count} coupling issues found ✖[/]")


class TerminalResultReporter:
    """Render run results and inspection reports as rich tables."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def _uses_table(self, title: str, forbidden_uses: tuple[tuple[str, int], ...]) -> Table:
        table = Table(title=title, header_style="bold #C41E3A", min_width=len(title) + 4)
        table.add_column("Count", style="bold #007BFF", justify="right")
        table.add_column("Symbol", style="#00EEFF")
        for symbol, count in forbidden_uses:
            table.add_row(str(count), escape(symbol))
        return table

    def _report_violation(self, violation: Violation) -> None:
        color = "yellow" if violation.type is ViolationType.WARNING else "red"
        self.console.print(
            f"[{color}]{violation.type.value}[/] {escape(violation.node.file_path)} "
            f"({escape(str(violation.node.declared_namespace))}) breaks {escape(str(violation.rule))}",
            highlight=False,
        )
        for token in violation.token_violations:
            self.console.print(
                f"    {token.location.line}:{token.location.column}  {escape(str(token.symbol))}",
                highlight=False,
            )

    def report_run(self, label: str, run: RunResult, verbose: bool = False) -> None:
        summary = run.summary
        if summary.forbidden_uses:
            self.console.print(self._uses_table(escape(f"[{label}] Coupling issues"), summary.forbidden_uses))
        if verbose:
            for violation in run.violations:
                self._report_violation(violation)
        self.console.print(
            f"{summary.total_count} coupling issues for namespace {escape(label)}",
            highlight=False,
        )
        if summary.skipped_count:
            self.console.print(
                f"[yellow]{summary.skipped_count} files skipped:[/] "
                + ", ".join(escape(path) for path in run.skipped),
                highlight=False,
            )

    def report_inspection(self, report: InspectionReport, verbose: bool = False) -> None:
        for result in report.results:
            label = str(result.check.subject)
            self.console.print(f"[bold]>> Inspect namespace {escape(label)}[/]", highlight=False)
            if result.run is None:
                self.console.print(f"[red]{escape(result.error or 'failed')}[/]", highlight=False)
                continue
            self.report_run(label, result.run, verbose=verbose)
        self.console.print(f"[bold]Total coupling issues {report.total_count}[/]", highlight=False)
