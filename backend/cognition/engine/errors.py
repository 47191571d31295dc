"""Error taxonomy for the analysis engine.

Each error is contained at the smallest unit that can fail: a single
analyzer, a single user's analysis, or a single cache operation.
"""


class CognitiveEngineError(Exception):
    """Base class for every engine failure."""


class DataUnavailable(CognitiveEngineError):
    """The persistence boundary could not be reached."""


class AnalysisTimeout(CognitiveEngineError):
    """A user's analysis did not finish within the configured deadline."""

    def __init__(self, user_id: str, timeout: float):
        super().__init__(f"analysis for {user_id} exceeded {timeout:.1f}s")
        self.user_id = user_id
        self.timeout = timeout


class AnalyzerFault(CognitiveEngineError):
    """A single analyzer raised; the others still contribute."""

    def __init__(self, analyzer: str, cause: BaseException):
        super().__init__(f"{analyzer} failed: {cause!r}")
        self.analyzer = analyzer
        self.cause = cause


class CacheUnavailable(CognitiveEngineError):
    """The result cache backend refused a read or write."""
