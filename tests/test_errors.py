import pytest

from core.errors import (
    BrowserSessionError,
    ClaimError,
    ConfirmationError,
    ElementNotFoundError,
    ErrorType,
    NavigationError,
    SubmitError,
    classify_error,
)


@pytest.mark.parametrize("exc,expected", [
    (NavigationError("timeout"), ErrorType.NAVIGATION),
    (ElementNotFoundError("no input"), ErrorType.ELEMENT_NOT_FOUND),
    (SubmitError("click failed"), ErrorType.SUBMIT),
    (ConfirmationError("no signal"), ErrorType.CONFIRMATION),
    (BrowserSessionError("launch failed"), ErrorType.BROWSER),
    (ClaimError("generic"), ErrorType.UNKNOWN),
    (RuntimeError("boom"), ErrorType.UNKNOWN),
])
def test_classify_error(exc, expected):
    assert classify_error(exc) == expected


def test_button_lists_attached():
    buttons = ["[0] text='Connect'"]
    assert ElementNotFoundError("missing", buttons=buttons).buttons == buttons
    assert SubmitError("failed").buttons == []
