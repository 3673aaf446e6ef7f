"""Shared fixtures: an in-memory faucet page and browser manager.

``FakePage`` models just enough of the faucet DOM (one text input, a list
of buttons, the body text) to drive :class:`faucets.base.FaucetClaimer`
without a real browser.
"""

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Callable, Dict, List, Optional, Pattern
from unittest.mock import AsyncMock

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from core.config import BotSettings, ClaimConfig
from core.errors import BrowserSessionError
from faucets.dom import (
    ADDRESS_INPUT_SELECTOR,
    BUTTON_SELECTOR,
    CLICK_REQUEST_BUTTON_JS,
    SNAPSHOT_BUTTONS_JS,
    SUCCESS_TEXT_JS,
    has_success_signal,
    is_request_button,
)

FAUCET_URL = "https://faucet.example.test/"
PAGE_HTML = "<html><body><input type='text'><button>Request</button></body></html>"


class FakeInputLocator:
    def __init__(self, page: "FakePage") -> None:
        self.page = page

    @property
    def first(self) -> "FakeInputLocator":
        return self

    async def fill(self, value: str) -> None:
        self.page.events.append(f"fill:{value}")
        self.page.input_value = value

    async def press_sequentially(self, text: str, delay: float = 0) -> None:
        self.page.events.append("type")
        self.page.input_value += self.page.keystroke_filter(text)

    async def input_value(self) -> str:
        return self.page.input_value


class FakeButtonLocator:
    """``page.locator("button")``, optionally narrowed by ``filter(has_text=...)``.

    Buttons are matched against the page's live button list when an
    action runs, like a Playwright locator.
    """

    def __init__(self, page: "FakePage", pattern: Optional[Pattern[str]] = None) -> None:
        self.page = page
        self.pattern = pattern

    @property
    def first(self) -> "FakeButtonLocator":
        return self

    def filter(self, has_text: Pattern[str]) -> "FakeButtonLocator":
        return FakeButtonLocator(self.page, has_text)

    def _matches(self) -> List[Dict]:
        return [
            b for b in self.page.buttons
            if self.pattern is None or self.pattern.search(b["text"])
        ]

    async def count(self) -> int:
        return len(self._matches())

    async def scroll_into_view_if_needed(self, **kwargs) -> None:
        self.page.events.append("scroll")

    async def click(self, **kwargs) -> None:
        self.page.events.append("direct_click")
        if self.page.direct_click_error is not None:
            raise self.page.direct_click_error
        matches = self._matches()
        if not matches:
            raise PlaywrightTimeoutError("Timeout exceeded waiting for locator")
        self.page.clicked_buttons.append(matches[0]["text"])
        self.page.clicked_ids.append(matches[0].get("id"))
        self.page.on_click(self.page)


class FakePage:
    """Minimal stand-in for a Playwright ``Page`` on the faucet site."""

    def __init__(
        self,
        buttons: Optional[List[Dict]] = None,
        body_text: str = "Humanity Testnet Faucet",
        on_click: Optional[Callable[["FakePage"], None]] = None,
    ) -> None:
        self.buttons = buttons if buttons is not None else [
            {"text": " Connect ", "class": "btn nav", "id": "connect", "disabled": False},
            {"text": "Request", "class": "btn primary", "id": "req", "disabled": False},
        ]
        self.body_text = body_text
        self.on_click = on_click or (lambda page: None)
        self.input_value = ""
        self.keystroke_filter: Callable[[str], str] = lambda text: text
        self.direct_click_error: Optional[Exception] = None
        self.script_click_error: Optional[Exception] = None
        self.events: List[str] = []
        self.wait_for_function_calls: List[Dict] = []
        self.clicked_buttons: List[str] = []
        self.clicked_ids: List[Optional[str]] = []
        # What SNAPSHOT_BUTTONS_JS returns when the DOM changed after it ran
        self.stale_snapshot: Optional[List[Dict]] = None
        self.inner_text_delay = 0.0

        self.goto = AsyncMock()
        self.wait_for_selector = AsyncMock()
        self.wait_for_timeout = AsyncMock()
        self.content = AsyncMock(return_value=PAGE_HTML)
        self.screenshot = AsyncMock(side_effect=self._write_screenshot)

    async def _write_screenshot(self, path: str, full_page: bool = False) -> bytes:
        data = b"\x89PNG fake"
        Path(path).write_bytes(data)
        return data

    def locator(self, selector: str):
        if selector == ADDRESS_INPUT_SELECTOR:
            return FakeInputLocator(self)
        if selector == BUTTON_SELECTOR:
            return FakeButtonLocator(self)
        raise AssertionError(f"unexpected selector {selector!r}")

    async def evaluate(self, script: str, arg=None):
        if script == SNAPSHOT_BUTTONS_JS:
            source = self.stale_snapshot if self.stale_snapshot is not None else self.buttons
            return [dict(b) for b in source]
        if script == CLICK_REQUEST_BUTTON_JS:
            self.events.append("script_click")
            if self.script_click_error is not None:
                raise self.script_click_error
            for button in self.buttons:
                if is_request_button(button["text"]):
                    self.clicked_buttons.append(button["text"])
                    self.on_click(self)
                    return True
            raise Exception("Request button not found in fallback method")
        raise AssertionError("unexpected script")

    async def inner_text(self, selector: str) -> str:
        if self.inner_text_delay:
            await asyncio.sleep(self.inner_text_delay)
        return self.body_text

    async def wait_for_function(self, expression: str, arg=None, timeout: float = 30000, **kwargs) -> bool:
        """Polls the success-text rule until it holds or *timeout* ms pass."""
        if expression != SUCCESS_TEXT_JS:
            raise AssertionError("unexpected script")
        self.wait_for_function_calls.append({"arg": arg, "timeout": timeout})
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout / 1000
        while not has_success_signal(self.body_text):
            if loop.time() >= deadline:
                raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")
            await asyncio.sleep(0.005)
        return True


class FakeBrowserManager:
    """Hands out a prepared page and counts session open/close."""

    def __init__(self, page: Optional[FakePage] = None, launch_error: Optional[Exception] = None) -> None:
        self.page = page
        self.launch_error = launch_error
        self.opened = 0
        self.closed = 0

    @asynccontextmanager
    async def session(self):
        if self.launch_error is not None:
            raise BrowserSessionError(f"Failed to launch camoufox: {self.launch_error}")
        self.opened += 1
        try:
            yield self.page
        finally:
            self.closed += 1


def show_success(page: FakePage) -> None:
    page.body_text = "Request processing... tokens will arrive shortly"


@pytest.fixture
def settings(tmp_path):
    """BotSettings with short waits and debug output under tmp_path."""
    return BotSettings(
        confirmation_timeout_ms=60,
        post_click_delay_ms=0,
        typing_delay_ms=0,
        debug_dir=str(tmp_path / "debug-artifacts"),
    )


@pytest.fixture
def claim_config():
    return ClaimConfig(
        label="wallet1",
        target_url=FAUCET_URL,
        wallet_address="0xEDf4364Ca6AA3e6702DaB8b16eb63cc61B649EDD",
        interval_ms=90000,
    )
