"""Interface for result reporting."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from coupling_detector.use_cases.detect_coupling import RunResult
    from coupling_detector.use_cases.inspect_namespaces import InspectionReport


class ResultReporter(Protocol):
    """Protocol for rendering finished runs to the user."""

    def report_run(self, label: str, run: "RunResult", verbose: bool = False) -> None:
        """Report the summary (and, when verbose, every violation) of one run."""
        ...

    def report_inspection(self, report: "InspectionReport", verbose: bool = False) -> None:
        """Report every namespace of a multi-namespace inspection."""
        ...
