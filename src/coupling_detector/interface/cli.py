"""CLI entry points for the coupling detector - Thin Controller using Typer."""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from coupling_detector.domain.config import DetectorConfig
from coupling_detector.domain.entities import Rule, RuleType
from coupling_detector.domain.errors import ConfigurationError, SourceRootError
from coupling_detector.domain.events import Reporter
from coupling_detector.domain.exclusions import ExclusionSet, ViolationsFilter
from coupling_detector.domain.protocols import TelemetryPort
from coupling_detector.infrastructure.config_file_loader import ConfigFileLoader
from coupling_detector.interface.reporters import ResultReporter
from coupling_detector.use_cases.detect_coupling import DetectCouplingUseCase
from coupling_detector.use_cases.inspect_namespaces import InspectNamespacesUseCase

# Counts occupy 1..MAX_EXIT_CODE; usage errors sit above that range.
MAX_EXIT_CODE = 254
EXIT_USAGE_ERROR = 255
EXIT_STATUS_HELP = (
    f"Exit status: the number of coupling issues, capped at {MAX_EXIT_CODE}; "
    f"{EXIT_USAGE_ERROR} on configuration or source-root errors."
)


class OutputFormat(str, Enum):
    DOT = "dot"
    SUMMARY = "summary"


@dataclass(frozen=True)
class CLIDependencies:
    """Explicit dependencies for the CLI. All dependencies injected at composition root."""

    telemetry: TelemetryPort
    result_reporter: ResultReporter
    config_loader: type[ConfigFileLoader]
    detector_factory: Callable[..., DetectCouplingUseCase]
    progress_reporter_factory: Callable[[], Reporter]


class CLIAppFactory:
    """Creates the Typer app."""

    @staticmethod
    def configure_logging(debug: bool) -> None:
        """Route the package loggers to stderr through rich."""
        package_logger = logging.getLogger("coupling_detector")
        package_logger.setLevel(logging.DEBUG if debug else logging.WARNING)
        if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
            handler = RichHandler(console=Console(stderr=True), show_path=False)
            handler.setFormatter(logging.Formatter("%(message)s"))
            package_logger.addHandler(handler)

    @staticmethod
    def exit_code(total_count: int) -> int:
        """Violation count as exit status, capped below EXIT_USAGE_ERROR."""
        return min(total_count, MAX_EXIT_CODE)

    @staticmethod
    def create_app(deps: CLIDependencies) -> typer.Typer:
        """Create the Typer app with explicitly injected dependencies."""
        app = typer.Typer(
            name="coupling-detector",
            help="Detect forbidden dependencies between namespaces of a PHP source tree.",
            epilog=EXIT_STATUS_HELP,
            add_completion=False,
        )

        def progress_reporters(output_format: OutputFormat) -> list[Reporter]:
            if output_format is OutputFormat.DOT:
                return [deps.progress_reporter_factory()]
            return []

        @app.command(epilog=EXIT_STATUS_HELP)
        def detect(
            root: Path = typer.Argument(..., help="Source root, e.g. the project's src directory"),  # noqa: B008
            subject: str = typer.Option(..., "--subject", "-s", help="Namespace to check, e.g. Acme/Component"),
            forbid: List[str] = typer.Option(..., "--forbid", "-f", help="Namespace prefix (repeatable)"),  # noqa: B008
            rule_type: RuleType = typer.Option(RuleType.FORBIDDEN, "--rule-type", help="Rule semantics"),  # noqa: B008
            exclude: Optional[List[str]] = typer.Option(  # noqa: B008
                None, "--exclude", "-x", help="Exact symbol exempt from violations (repeatable)"),
            inline_references: bool = typer.Option(
                False, "--inline-references", help="Also report fully-qualified names used in code"),
            extension: str = typer.Option(".php", "--extension", help="Source file extension"),
            workers: Optional[int] = typer.Option(None, "--workers", min=1, help="Parser threads"),
            output_format: OutputFormat = typer.Option(OutputFormat.DOT, "--format"),  # noqa: B008
            verbose: bool = typer.Option(False, "--verbose", "-v", help="List every violation"),
            debug: bool = typer.Option(False, "--debug", help="Debug logging"),
        ) -> None:
            """Check one subject namespace against a set of namespace prefixes."""
            CLIAppFactory.configure_logging(debug)
            deps.telemetry.handshake()
            try:
                rule = Rule.create(subject, forbid, rule_type)
                violations_filter = (
                    ViolationsFilter(ExclusionSet.from_mapping({subject: exclude})) if exclude else None
                )
                detector = deps.detector_factory(
                    extension=extension,
                    inline_references=inline_references,
                    max_workers=workers,
                    violations_filter=violations_filter,
                    reporters=progress_reporters(output_format),
                )
                run = detector.execute(str(root), [rule])
            except (ConfigurationError, SourceRootError) as exc:
                deps.telemetry.error(str(exc))
                raise typer.Exit(code=EXIT_USAGE_ERROR) from exc

            deps.result_reporter.report_run(str(rule.subject), run, verbose=verbose)
            raise typer.Exit(code=CLIAppFactory.exit_code(run.summary.total_count))

        @app.command("inspect", epilog=EXIT_STATUS_HELP)
        def inspect_command(
            root: Path = typer.Argument(..., help="Source root, e.g. the project's src directory"),  # noqa: B008
            config: Optional[Path] = typer.Option(  # noqa: B008
                None, "--config", "-c", help="TOML file (default: nearest pyproject.toml)"),
            strict: bool = typer.Option(False, "--strict", help="Apply rules without legacy exclusions"),
            inline_references: Optional[bool] = typer.Option(
                None, "--inline-references/--imports-only", help="Override the configured strictness"),
            workers: Optional[int] = typer.Option(None, "--workers", min=1, help="Parser threads"),
            output_format: OutputFormat = typer.Option(OutputFormat.SUMMARY, "--format"),  # noqa: B008
            verbose: bool = typer.Option(False, "--verbose", "-v", help="List every violation"),
            debug: bool = typer.Option(False, "--debug", help="Debug logging"),
        ) -> None:
            """Check every namespace configured in [tool.coupling-detector]."""
            CLIAppFactory.configure_logging(debug)
            deps.telemetry.handshake()
            try:
                raw = (
                    deps.config_loader.load_config_file(str(config))
                    if config
                    else deps.config_loader.load_config_from_fs()
                )
                detector_config = DetectorConfig.from_dict(raw)
            except ConfigurationError as exc:
                deps.telemetry.error(str(exc))
                raise typer.Exit(code=EXIT_USAGE_ERROR) from exc
            if not detector_config.checks:
                deps.telemetry.error("No coupling rules configured in [tool.coupling-detector].")
                raise typer.Exit(code=EXIT_USAGE_ERROR)

            def detector_factory(violations_filter: Optional[ViolationsFilter]) -> DetectCouplingUseCase:
                return deps.detector_factory(
                    extension=detector_config.extension,
                    inline_references=(
                        detector_config.inline_references if inline_references is None else inline_references
                    ),
                    max_workers=workers or detector_config.max_workers,
                    violations_filter=violations_filter,
                    reporters=progress_reporters(output_format),
                )

            use_case = InspectNamespacesUseCase(detector_factory, deps.telemetry)
            report = use_case.execute(str(root), detector_config, strict=strict)
            deps.result_reporter.report_inspection(report, verbose=verbose)
            if report.total_count:
                raise typer.Exit(code=CLIAppFactory.exit_code(report.total_count))
            if report.failed:
                raise typer.Exit(code=EXIT_USAGE_ERROR)
            raise typer.Exit(code=0)

        return app


create_app = CLIAppFactory.create_app
