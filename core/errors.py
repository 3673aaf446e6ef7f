"""Claim error taxonomy.

Every failure of a claim attempt is raised as a :class:`ClaimError`
subclass inside the attempt and turned into a failed ``ClaimResult`` at
the attempt boundary.  :class:`ErrorType` is the value reported in that
result and in the logs.
"""

from enum import Enum
from typing import List, Optional, Sequence


class ErrorType(Enum):
    """Classification of claim failures.

    - NAVIGATION: The faucet page did not load / settle in time.
    - ELEMENT_NOT_FOUND: The address input or the Request button is missing.
    - SUBMIT: The Request button exists but neither click strategy worked.
    - CONFIRMATION: No success text appeared and the button stayed enabled.
    - BROWSER: The browser session could not be opened.
    - UNKNOWN: Anything else.
    """
    NAVIGATION = "navigation"
    ELEMENT_NOT_FOUND = "element_not_found"
    SUBMIT = "submit"
    CONFIRMATION = "confirmation"
    BROWSER = "browser"
    UNKNOWN = "unknown"


class ClaimError(Exception):
    """Base class for failures of a single claim attempt."""

    error_type: ErrorType = ErrorType.UNKNOWN


class NavigationError(ClaimError):
    error_type = ErrorType.NAVIGATION


class ElementNotFoundError(ClaimError):
    """Input or button missing; ``buttons`` lists what the page did have."""

    error_type = ErrorType.ELEMENT_NOT_FOUND

    def __init__(self, message: str, buttons: Optional[Sequence[object]] = None) -> None:
        super().__init__(message)
        self.buttons: List[object] = list(buttons or [])


class SubmitError(ClaimError):
    """Both click strategies failed on the Request button."""

    error_type = ErrorType.SUBMIT

    def __init__(self, message: str, buttons: Optional[Sequence[object]] = None) -> None:
        super().__init__(message)
        self.buttons: List[object] = list(buttons or [])


class ConfirmationError(ClaimError):
    error_type = ErrorType.CONFIRMATION


class BrowserSessionError(ClaimError):
    error_type = ErrorType.BROWSER


def classify_error(exc: BaseException) -> ErrorType:
    """Map an exception raised during an attempt to an :class:`ErrorType`."""
    if isinstance(exc, ClaimError):
        return exc.error_type
    return ErrorType.UNKNOWN
