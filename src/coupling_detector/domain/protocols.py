from typing import TYPE_CHECKING, Iterator, Protocol

if TYPE_CHECKING:
    from coupling_detector.domain.entities import Node


class SourceScannerProtocol(Protocol):
    """Restartable, finite sequence of candidate source files."""

    def __iter__(self) -> Iterator[str]: ...
    def __len__(self) -> int: ...


class SourceScannerFactoryProtocol(Protocol):
    def __call__(self, root: str, subject: str) -> SourceScannerProtocol: ...


class NodeParserProtocol(Protocol):
    """Protocol for turning one source file into a Node."""

    def parse(self, file_path: str) -> "Node":
        """Parse a file. Raises NodeParseError when the file cannot be read or tokenized."""
        ...


class TelemetryPort(Protocol):
    """Protocol for telemetry/UI updates."""

    def step(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...
    def warning(self, message: str) -> None: ...
    def handshake(self) -> None: ...
