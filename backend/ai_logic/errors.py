# ============================ DISPATCH ERRORS ============================
from enum import Enum
from typing import NamedTuple, Optional

from models import AgentResponse


class ErrorKind(str, Enum):
    MISSING_CREDENTIAL = "missing_credential"
    MISSING_PARAMETER = "missing_parameter"
    INVALID_PARAMETER = "invalid_parameter"
    RESOLUTION_MISS = "resolution_miss"
    VENDOR_ERROR = "vendor_error"
    UNEXPECTED = "unexpected"


class DispatchError(Exception):
    """A failure a handler reports to the user as a normal reply."""

    kind = ErrorKind.UNEXPECTED

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingCredential(DispatchError):
    kind = ErrorKind.MISSING_CREDENTIAL

    def __init__(self, vendor: str, message: str):
        super().__init__(message)
        self.vendor = vendor


class MissingParameter(DispatchError):
    kind = ErrorKind.MISSING_PARAMETER


class InvalidParameter(DispatchError):
    kind = ErrorKind.INVALID_PARAMETER


class ResolutionMiss(DispatchError):
    kind = ErrorKind.RESOLUTION_MISS

    def __init__(self, name: str, message: str):
        super().__init__(message)
        self.name = name


class DispatchResult(NamedTuple):
    response: AgentResponse
    error_kind: Optional[ErrorKind] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None
