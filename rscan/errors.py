"""Exceptions raised by the scanner."""


class RscanError(Exception):
    """Base class for scanner errors."""


class AlignmentError(RscanError):
    """Input alignment is empty or its sequences differ in length."""


class ConfigurationError(RscanError):
    """Groups, color ranges or layout values were rejected."""


class FormulaError(RscanError):
    """Scoring formula could not be parsed or evaluated."""


class SessionError(RscanError):
    """Operation needs state the session does not hold yet."""


class ScanError(RscanError):
    """A scan was aborted; the previous scores are left in place."""

    def __init__(self, message: str, position: int, seq_index: int, label: str = ""):
        super().__init__(message)
        self.position = position
        self.seq_index = seq_index
        self.label = label
