"""Page-matching rules of the claim procedure.

Pure predicates over a snapshot of the page's buttons and visible text,
with no Playwright dependency, so the rules can be checked against plain
data.  The page is only asked for raw facts (button list, body text); the
decisions are made here.
"""

import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence

REQUEST_BUTTON_TEXT = "Request"
# Locator filter equivalent of is_request_button()
REQUEST_BUTTON_PATTERN = re.compile(r"^\s*Request\s*$")
SUCCESS_MARKERS = ("success", "sent", "received", "processing")

ADDRESS_INPUT_SELECTOR = 'input[type="text"]'
BUTTON_SELECTOR = "button"


@dataclass(frozen=True)
class ButtonInfo:
    """Snapshot of one ``<button>`` element.

    ``index`` is the element's position among all ``<button>`` elements
    in document order at snapshot time; it is only used for reporting.
    """

    text: str
    class_name: str = ""
    id: str = ""
    disabled: bool = False
    index: int = 0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], index: int = 0) -> "ButtonInfo":
        return cls(
            text=str(data.get("text") or ""),
            class_name=str(data.get("class") or ""),
            id=str(data.get("id") or ""),
            disabled=bool(data.get("disabled", False)),
            index=index,
        )


def is_request_button(text: Optional[str]) -> bool:
    """True if *text* trims to exactly ``"Request"``."""
    if text is None:
        return False
    return text.strip() == REQUEST_BUTTON_TEXT


def find_request_button(buttons: Iterable[ButtonInfo]) -> Optional[ButtonInfo]:
    for button in buttons:
        if is_request_button(button.text):
            return button
    return None


def has_success_signal(body_text: Optional[str]) -> bool:
    """Case-insensitive check for any of :data:`SUCCESS_MARKERS`."""
    if not body_text:
        return False
    lowered = body_text.lower()
    return any(marker in lowered for marker in SUCCESS_MARKERS)


def request_button_disabled(buttons: Iterable[ButtonInfo]) -> bool:
    """Disabled state of the Request button; ``False`` if there is none."""
    button = find_request_button(buttons)
    return button.disabled if button else False


def describe_buttons(buttons: Sequence[ButtonInfo]) -> str:
    if not buttons:
        return "no buttons on page"
    return "; ".join(
        f"[{b.index + 1}] text='{b.text.strip()[:50]}' class='{b.class_name}' id='{b.id}'"
        f"{' disabled' if b.disabled else ''}"
        for b in buttons
    )


def parse_buttons(raw: Any) -> List[ButtonInfo]:
    """Build :class:`ButtonInfo` objects from :data:`SNAPSHOT_BUTTONS_JS` output."""
    if not isinstance(raw, list):
        return []
    return [
        ButtonInfo.from_mapping(item, index)
        for index, item in enumerate(raw)
        if isinstance(item, Mapping)
    ]


# ---------------------------------------------------------------------------
# In-page scripts
# ---------------------------------------------------------------------------

SNAPSHOT_BUTTONS_JS = """
() => Array.from(document.querySelectorAll('button')).map((b) => ({
    text: (b.textContent || '').trim(),
    class: b.className,
    id: b.id,
    disabled: b.disabled,
}))
"""

# Same rule as is_request_button(), run inside the page.
CLICK_REQUEST_BUTTON_JS = """
(label) => {
    const buttons = Array.from(document.querySelectorAll('button'));
    const btn = buttons.find((b) => (b.textContent || '').trim() === label);
    if (!btn) {
        throw new Error('Request button not found in fallback method');
    }
    btn.click();
    return true;
}
"""

# Same rule as has_success_signal(), polled by page.wait_for_function().
SUCCESS_TEXT_JS = """
(markers) => {
    const text = ((document.body && document.body.innerText) || '').toLowerCase();
    return markers.some((marker) => text.includes(marker));
}
"""
