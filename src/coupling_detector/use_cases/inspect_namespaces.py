"""Use Case: Inspect Namespaces - run every configured check independently."""

from dataclasses import dataclass
from typing import Callable, Optional

from coupling_detector.domain.config import CouplingCheck, DetectorConfig
from coupling_detector.domain.errors import SourceRootError
from coupling_detector.domain.exclusions import ViolationsFilter
from coupling_detector.domain.protocols import TelemetryPort
from coupling_detector.use_cases.detect_coupling import DetectCouplingUseCase, RunResult


@dataclass(frozen=True)
class NamespaceResult:
    """Outcome of one check: a run result, or the error that made it fail."""

    check: CouplingCheck
    run: Optional[RunResult] = None
    error: Optional[str] = None

    @property
    def count(self) -> int:
        return self.run.summary.total_count if self.run else 0


@dataclass(frozen=True)
class InspectionReport:
    results: tuple[NamespaceResult, ...]
    strict: bool = False

    @property
    def total_count(self) -> int:
        return sum(result.count for result in self.results)

    @property
    def failed(self) -> tuple[NamespaceResult, ...]:
        return tuple(result for result in self.results if result.error is not None)


class InspectNamespacesUseCase:
    """
    Detect coupling for each subject namespace of a configuration.

    Legacy exclusions apply unless ``strict`` is set. A root error on one
    check is recorded and the remaining checks still run.
    """

    def __init__(
        self,
        detector_factory: Callable[[Optional[ViolationsFilter]], DetectCouplingUseCase],
        telemetry: TelemetryPort,
    ) -> None:
        self.detector_factory = detector_factory
        self.telemetry = telemetry

    def execute(self, root: str, config: DetectorConfig, strict: bool = False) -> InspectionReport:
        mode = "enabled" if strict else "disabled"
        self.telemetry.step(f"Detect coupling violations (strict mode {mode})")
        violations_filter = None if strict else ViolationsFilter(config.exclusions)

        results: list[NamespaceResult] = []
        for check in config.checks:
            self.telemetry.step(f"Inspecting namespace {check.subject}")
            detector = self.detector_factory(violations_filter)
            try:
                run = detector.execute(root, check.rules)
            except SourceRootError as exc:
                self.telemetry.error(f"Namespace {check.subject}: {exc}")
                results.append(NamespaceResult(check=check, error=str(exc)))
                continue
            results.append(NamespaceResult(check=check, run=run))
        return InspectionReport(results=tuple(results), strict=strict)
