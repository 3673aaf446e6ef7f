"""Faucet claim procedure and claim result definitions.

This module defines :class:`FaucetClaimer`, which performs one claim
attempt (navigate, fill, submit, confirm) for one wallet, and the
:class:`ClaimResult` dataclass returned by every attempt.

An attempt never raises: each failure is classified, diagnosed (a
screenshot and the page HTML are saved) and logged, then reported as a
failed :class:`ClaimResult`.  The browser session of the attempt is
always closed before :meth:`FaucetClaimer.claim` returns.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from browser.instance import BrowserManager
from core.artifacts import DebugArtifactWriter
from core.config import BotSettings, ClaimConfig
from core.errors import (
    ConfirmationError,
    ElementNotFoundError,
    ErrorType,
    NavigationError,
    SubmitError,
    classify_error,
)
from core.logging_setup import WalletLogAdapter
from faucets.dom import (
    ADDRESS_INPUT_SELECTOR,
    BUTTON_SELECTOR,
    CLICK_REQUEST_BUTTON_JS,
    REQUEST_BUTTON_PATTERN,
    REQUEST_BUTTON_TEXT,
    SNAPSHOT_BUTTONS_JS,
    SUCCESS_MARKERS,
    SUCCESS_TEXT_JS,
    ButtonInfo,
    describe_buttons,
    find_request_button,
    parse_buttons,
    request_button_disabled,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ClaimResult:
    """Outcome of a single claim attempt.

    Attributes:
        label: Wallet label the attempt ran for.
        success: Whether the faucet confirmed the request.
        status: Human-readable status / error description.
        error_type: :class:`ErrorType` of a failed attempt.
        screenshot_path: Failure screenshot, if one was saved.
        html_path: Failure HTML snapshot, if one was saved.
        started_at: UTC start of the attempt.
        finished_at: UTC end of the attempt.
    """

    label: str
    success: bool
    status: str
    error_type: Optional[ErrorType] = None
    screenshot_path: Optional[Path] = None
    html_path: Optional[Path] = None
    started_at: datetime = field(default_factory=_utcnow)
    finished_at: Optional[datetime] = None

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()


class FaucetClaimer:
    """Runs claim attempts against a faucet page.

    The claimer holds no per-attempt state, so one instance can serve
    every wallet concurrently; each call to :meth:`claim` opens its own
    browser session.

    Attributes:
        settings: Global :class:`BotSettings` (timeouts, delays).
        browser_manager: Source of per-attempt browser sessions.
        artifact_writer: Writer for failure screenshots / HTML.
    """

    def __init__(
        self,
        settings: BotSettings,
        browser_manager: BrowserManager,
        artifact_writer: DebugArtifactWriter,
    ) -> None:
        self.settings = settings
        self.browser_manager = browser_manager
        self.artifact_writer = artifact_writer

    async def claim(self, config: ClaimConfig) -> ClaimResult:
        """Perform one claim attempt for *config*.

        Returns:
            :class:`ClaimResult`; failures are reported, not raised.
        """
        log = WalletLogAdapter(logger, config.label)
        started_at = _utcnow()
        log.info("Starting faucet claim at %s", started_at.isoformat())

        try:
            async with self.browser_manager.session() as page:
                try:
                    await self.navigate(page, config, log)
                    await self.fill_address(page, config, log)
                    await self.click_request_button(page, log)
                    signal = await self.wait_for_confirmation(page, log)
                except Exception as e:
                    return await self._failed(page, config, e, started_at, log)
        except Exception as e:
            # The session itself could not be opened.
            return await self._failed(None, config, e, started_at, log)

        finished_at = _utcnow()
        log.info("Faucet claimed successfully at %s", finished_at.isoformat())
        return ClaimResult(
            label=config.label,
            success=True,
            status=f"Claimed ({signal})",
            started_at=started_at,
            finished_at=finished_at,
        )

    async def _failed(
        self,
        page: Optional[Page],
        config: ClaimConfig,
        error: Exception,
        started_at: datetime,
        log: WalletLogAdapter,
    ) -> ClaimResult:
        error_type = classify_error(error)
        finished_at = _utcnow()
        log.error(
            "Error claiming faucet at %s (%s): %s",
            finished_at.isoformat(), error_type.value, error,
        )
        artifacts = await self.artifact_writer.save(page, config.label, finished_at)
        return ClaimResult(
            label=config.label,
            success=False,
            status=f"{error_type.value}: {str(error)[:200]}",
            error_type=error_type,
            screenshot_path=artifacts.screenshot_path,
            html_path=artifacts.html_path,
            started_at=started_at,
            finished_at=finished_at,
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def navigate(self, page: Page, config: ClaimConfig, log: WalletLogAdapter) -> None:
        log.info("Navigating to faucet...")
        try:
            await page.goto(
                config.target_url,
                wait_until="networkidle",
                timeout=self.settings.navigation_timeout_ms,
            )
        except Exception as e:
            raise NavigationError(
                f"Failed to load {config.target_url}: {e}"
            ) from e

    async def fill_address(self, page: Page, config: ClaimConfig, log: WalletLogAdapter) -> None:
        """Type the wallet address into the single-line text input."""
        log.info("Filling address...")
        try:
            await page.wait_for_selector(
                ADDRESS_INPUT_SELECTOR,
                state="visible",
                timeout=self.settings.input_timeout_ms,
            )
        except Exception as e:
            raise ElementNotFoundError(
                f"Address input not found: {e}"
            ) from e

        field_locator = page.locator(ADDRESS_INPUT_SELECTOR).first
        await field_locator.fill("")
        await field_locator.press_sequentially(
            config.wallet_address, delay=self.settings.typing_delay_ms,
        )

        # Some inputs reformat keystrokes; the faucet must get the exact address.
        value = await field_locator.input_value()
        if value != config.wallet_address:
            log.warning("Typed value %r differs from address, filling directly", value)
            await field_locator.fill(config.wallet_address)

    async def snapshot_buttons(self, page: Page) -> List[ButtonInfo]:
        """Text/class/id/disabled of every ``<button>`` on the page."""
        try:
            raw: Any = await page.evaluate(SNAPSHOT_BUTTONS_JS)
        except Exception as e:
            logger.debug("Button snapshot failed: %s", e)
            return []
        return parse_buttons(raw)

    async def click_request_button(self, page: Page, log: WalletLogAdapter) -> str:
        """Click the button whose trimmed text is exactly ``Request``.

        A direct click on the located element is tried first; only if
        it raises is the click dispatched by script inside the page.

        Returns:
            ``"direct"`` or ``"script"``, the strategy that worked.

        Raises:
            ElementNotFoundError: No Request button exists on the page.
            SubmitError: The button exists but both strategies failed.
        """
        log.info("Attempting to click Request button...")
        try:
            await self._direct_click(page, log)
            log.info("Clicked the Request button using direct click")
            return "direct"
        except Exception as e:
            log.warning("Failed to click the Request button: %s", e)

        try:
            await page.evaluate(CLICK_REQUEST_BUTTON_JS, REQUEST_BUTTON_TEXT)
            log.info("Clicked the Request button using JavaScript evaluation")
            await page.wait_for_timeout(self.settings.post_click_delay_ms)
            return "script"
        except Exception as fallback_error:
            log.error("Fallback click method failed: %s", fallback_error)

        buttons = await self.snapshot_buttons(page)
        log.error("Available buttons on the page: %s", describe_buttons(buttons))
        if find_request_button(buttons) is None:
            raise ElementNotFoundError("Request button not found on the page", buttons)
        raise SubmitError("All button click methods failed", buttons)

    async def _direct_click(self, page: Page, log: WalletLogAdapter) -> None:
        await page.wait_for_selector(
            BUTTON_SELECTOR,
            state="visible",
            timeout=self.settings.button_timeout_ms,
        )
        # Resolved by text at click time, not by a position from an earlier snapshot
        locator = page.locator(BUTTON_SELECTOR).filter(has_text=REQUEST_BUTTON_PATTERN).first
        if await locator.count() == 0:
            buttons = await self.snapshot_buttons(page)
            raise ElementNotFoundError("Request button not found on the page", buttons)

        log.info("Request button found, attempting to click...")
        await locator.scroll_into_view_if_needed(timeout=self.settings.button_timeout_ms)
        await locator.click(timeout=self.settings.button_timeout_ms)
        await page.wait_for_timeout(self.settings.post_click_delay_ms)

    async def wait_for_confirmation(self, page: Page, log: WalletLogAdapter) -> str:
        """Wait for a success signal after submitting.

        Success is either one of the success markers appearing in the
        page's visible text within the confirmation timeout or, failing
        that, the Request button having become disabled.

        Returns:
            ``"page content"`` or ``"button disabled"``.

        Raises:
            ConfirmationError: Neither signal was observed.
        """
        log.info("Waiting for confirmation...")
        if await self._wait_for_success_text(page, log):
            log.info("Confirmation detected via page content")
            return "page content"

        buttons = await self.snapshot_buttons(page)
        if request_button_disabled(buttons):
            log.info("Button disabled state indicates success")
            return "button disabled"

        raise ConfirmationError(
            "Failed to confirm faucet claim: no success message within "
            f"{self.settings.confirmation_timeout_ms} ms and Request button still enabled"
        )

    async def _wait_for_success_text(self, page: Page, log: WalletLogAdapter) -> bool:
        try:
            await page.wait_for_function(
                SUCCESS_TEXT_JS,
                arg=list(SUCCESS_MARKERS),
                timeout=self.settings.confirmation_timeout_ms,
            )
            return True
        except PlaywrightTimeoutError:
            return False
        except Exception as e:
            log.warning("Waiting for success message failed: %s", e)
            return False
