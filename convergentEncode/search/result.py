from enum import Enum
from typing import List, Optional

from convergentEncode.core.exception import (
    SearchException,
    ExecutorFailure,
    ConfigurationError,
    NonConvergence,
)
from convergentEncode.encoder.speed import SpeedDescriptor
from convergentEncode.encoder.stats import Phase, TrialRecord


class FailureKind(Enum):
    EXECUTOR_FAILURE: int = 0
    CONFIGURATION_ERROR: int = 1
    NON_CONVERGENCE: int = 2

    def __str__(self):
        return self.name

    @staticmethod
    def from_exception(e: SearchException) -> "FailureKind":
        match e:
            case ExecutorFailure():
                return FailureKind.EXECUTOR_FAILURE
            case ConfigurationError():
                return FailureKind.CONFIGURATION_ERROR
            case NonConvergence():
                return FailureKind.NON_CONVERGENCE
            case _:
                raise ValueError(f"Unknown search exception {e!r}")


class SearchResult:
    """
    What a search run ended with: the tuned parameters, or why there are none
    """

    def __init__(
        self,
        control_value: Optional[float] = None,
        speed: Optional[SpeedDescriptor] = None,
        history: Optional[List[TrialRecord]] = None,
        failure: Optional[FailureKind] = None,
        failed_phase: Optional[Phase] = None,
        error: Optional[SearchException] = None,
    ):
        self.control_value = control_value
        self.speed = speed
        self.history = history if history is not None else []
        self.failure = failure
        self.failed_phase = failed_phase
        self.error = error

    @staticmethod
    def succeeded(
        control_value: float, speed: SpeedDescriptor, history: List[TrialRecord]
    ) -> "SearchResult":
        return SearchResult(control_value=control_value, speed=speed, history=history)

    @staticmethod
    def failed(e: SearchException, phase: Optional[Phase] = None) -> "SearchResult":
        # no partial parameters or history leave a failed search
        return SearchResult(
            failure=FailureKind.from_exception(e), failed_phase=phase, error=e
        )

    @property
    def success(self) -> bool:
        return self.failure is None

    @property
    def message(self) -> str:
        return self.error.message if self.error is not None else ""

    def raise_for_failure(self) -> "SearchResult":
        if self.error is not None:
            raise self.error
        return self

    def __repr__(self):
        if self.success:
            return (
                f"SearchResult(control_value={self.control_value}, speed={self.speed},"
                f" trials={len(self.history)})"
            )
        return (
            f"SearchResult(failure={self.failure}, phase={self.failed_phase},"
            f" message={self.message!r})"
        )
