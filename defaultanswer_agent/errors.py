from __future__ import annotations


class DefaultAnswerError(Exception):
    """Base class for errors that are reported back to API callers."""


class InvalidInput(DefaultAnswerError, ValueError):
    pass


class InvalidUrl(InvalidInput):
    pass


class IncompatibleSchemaVersion(DefaultAnswerError):
    def __init__(self, version_a: str, version_b: str):
        self.version_a = version_a
        self.version_b = version_b
        super().__init__(
            f"Reports were produced by different rubric versions ({version_a} vs {version_b}) and cannot be compared."
        )


class UnsupportedInput(DefaultAnswerError):
    pass


class StoreUnavailable(DefaultAnswerError):
    pass


class ScanNotFound(DefaultAnswerError):
    pass
