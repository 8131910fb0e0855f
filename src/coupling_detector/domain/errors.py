"""Error taxonomy for coupling detection runs."""


class CouplingDetectorError(Exception):
    """Base class for every error raised by the detector."""


class SourceRootError(CouplingDetectorError, OSError):
    """Root path is missing, not a directory, or unreadable. Fatal for one check."""


class NodeParseError(CouplingDetectorError):
    """A single source file could not be read or tokenized. The file is skipped."""

    def __init__(self, file_path: str, reason: str) -> None:
        super().__init__(f"{file_path}: {reason}")
        self.file_path = file_path
        self.reason = reason


class ConfigurationError(CouplingDetectorError, ValueError):
    """Malformed rule or configuration table. Raised before any scanning."""


class RunCancelledError(CouplingDetectorError):
    """The run was aborted between file or rule boundaries."""
