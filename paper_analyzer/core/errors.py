"""Exception types raised across the analyzer service."""


class AnalyzerError(Exception):
    """Base class for analyzer failures surfaced to the stream as `Error:` fragments."""


class ConfigurationError(AnalyzerError, RuntimeError):
    """Raised at startup when required configuration is missing or invalid."""


class StagingError(AnalyzerError):
    """Raised when an upload cannot be written to its temporary staging area."""

    def __init__(self, filename: str, reason: str):
        super().__init__(f"Failed to stage {filename!r}: {reason}")
        self.filename = filename
        self.reason = reason


class DocumentLoadError(AnalyzerError):
    """Raised when a staged file cannot be opened or read as a PDF."""

    def __init__(self, filename: str, reason: str):
        super().__init__(f"Failed to load PDF {filename!r}: {reason}")
        self.filename = filename
        self.reason = reason
