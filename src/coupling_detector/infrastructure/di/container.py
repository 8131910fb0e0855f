import functools
import threading
from typing import TYPE_CHECKING, Any, Optional, Sequence

from coupling_detector.domain.events import EventDispatcher
from coupling_detector.infrastructure.gateways.filesystem_gateway import SourceScanner
from coupling_detector.infrastructure.gateways.php_token_gateway import PhpNodeParser
from coupling_detector.infrastructure.reporters import DotReporter, TerminalResultReporter
from coupling_detector.interface.telemetry import ProjectTelemetry
from coupling_detector.use_cases.detect_coupling import DetectCouplingUseCase

if TYPE_CHECKING:
    from coupling_detector.domain.events import Reporter
    from coupling_detector.domain.exclusions import ViolationsFilter
    from coupling_detector.domain.protocols import TelemetryPort
    from coupling_detector.interface.reporters import ResultReporter


class CouplingDetectorContainer:
    """Dependency Injection Container for the coupling detector."""

    def __init__(self) -> None:
        self._singletons: dict[str, Any] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        """Register default implementations for protocols."""
        self.register_singleton(
            "TelemetryPort", ProjectTelemetry("COUPLING-DETECTOR", "cyan", "Layering audit online"))
        self.register_singleton("ResultReporter", TerminalResultReporter())

    def register_singleton(self, key: str, instance: Any) -> None:
        self._singletons[key] = instance

    def get(self, key: str) -> Any:
        if key not in self._singletons:
            raise KeyError(f"No registration for '{key}'")
        return self._singletons[key]

    def get_telemetry_port(self) -> "TelemetryPort":
        return self.get("TelemetryPort")

    def get_result_reporter(self) -> "ResultReporter":
        return self.get("ResultReporter")

    @staticmethod
    def create_progress_reporter() -> "Reporter":
        return DotReporter()

    @staticmethod
    def create_detector(
        extension: str = ".php",
        inline_references: bool = False,
        max_workers: Optional[int] = None,
        violations_filter: Optional["ViolationsFilter"] = None,
        reporters: Sequence["Reporter"] = (),
        cancel_event: Optional[threading.Event] = None,
    ) -> DetectCouplingUseCase:
        """Wire a detection use case: one parser, one scanner factory, a fresh dispatcher."""
        return DetectCouplingUseCase(
            parser=PhpNodeParser(include_inline_references=inline_references),
            scanner_factory=functools.partial(SourceScanner, extension=extension),
            dispatcher=EventDispatcher(list(reporters)),
            violations_filter=violations_filter,
            max_workers=max_workers,
            cancel_event=cancel_event,
        )
