"""Package entry point - composition root. Wire dependencies and run the CLI app."""

from coupling_detector.infrastructure.config_file_loader import ConfigFileLoader
from coupling_detector.infrastructure.di.container import CouplingDetectorContainer
from coupling_detector.interface.cli import CLIDependencies, create_app


def main() -> None:
    """Entry point: wire dependencies at composition root, create app, run."""
    container = CouplingDetectorContainer()

    deps = CLIDependencies(
        telemetry=container.get_telemetry_port(),
        result_reporter=container.get_result_reporter(),
        config_loader=ConfigFileLoader,
        detector_factory=container.create_detector,
        progress_reporter_factory=container.create_progress_reporter,
    )

    app = create_app(deps)
    app()


if __name__ == "__main__":
    main()
