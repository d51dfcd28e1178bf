"""
Error taxonomy for the analysis pipeline
"""
from enum import Enum
from typing import Optional


class AnalysisError(Exception):
    """Base class for every error raised by the pipeline"""
    pass


class ConfigurationError(AnalysisError):
    """A remote service is not initialized or a required setting is missing"""
    pass


class TranscriptionExhausted(AnalysisError):
    """Every encoding strategy on every backend failed or returned no text"""
    pass


class TranscriptionTimeout(TranscriptionExhausted):
    """A staged transcription job ran past its deadline"""

    def __init__(self, message: str, timeout_seconds: Optional[float] = None):
        super().__init__(message)
        self.timeout_seconds = timeout_seconds


class VideoAnalysisDegraded(AnalysisError):
    """Video analysis failed; the request continues without body language"""
    pass


class ContentAnalysisFailure(AnalysisError):
    """The content-analysis service failed or returned an unusable answer"""
    pass


class BackendErrorCode(str, Enum):
    PAYLOAD_TOO_LONG = "payload_too_long"
    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"
    INVALID_REQUEST = "invalid_request"
    UNKNOWN = "unknown"


class BackendError(AnalysisError):
    """Failure reported by a remote service adapter, classified by code"""

    def __init__(self, code: BackendErrorCode, message: str, backend: str = ""):
        super().__init__(message)
        self.code = code
        self.backend = backend

    def __str__(self):
        prefix = f"[{self.backend}] " if self.backend else ""
        return f"{prefix}{self.code.value}: {super().__str__()}"
