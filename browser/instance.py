"""Per-attempt browser sessions for the faucet claimer.

Provides :class:`BrowserManager`, whose :meth:`BrowserManager.session`
async context manager launches a fresh browser, yields a single page and
closes the browser again on every exit path.  Sessions are never shared
between wallets or between attempts.

Engines:

* ``camoufox`` (default) -- hardened Firefox fork driven through
  Playwright via ``camoufox.async_api.AsyncCamoufox``.
* ``chromium`` / ``firefox`` / ``webkit`` -- stock Playwright browsers.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Tuple

from browserforge.fingerprints import Screen
from camoufox.async_api import AsyncCamoufox
from playwright.async_api import Browser, Page, async_playwright

from core.errors import BrowserSessionError

logger = logging.getLogger(__name__)

PLAYWRIGHT_ENGINES = ("chromium", "firefox", "webkit")
CHROMIUM_ARGS: List[str] = ["--no-sandbox", "--disable-setuid-sandbox"]


class BrowserManager:
    """Launches one isolated browser per claim attempt.

    The manager itself holds only launch options, so a single instance
    can serve any number of concurrent claim loops.
    """

    def __init__(
        self,
        headless: bool = False,
        engine: str = "camoufox",
        viewport: Tuple[int, int] = (1280, 800),
        navigation_timeout_ms: int = 60000,
        user_agent: Optional[str] = None,
    ) -> None:
        """Initialise the BrowserManager.

        Args:
            headless: Run without a visible window.
            engine: ``camoufox`` or one of :data:`PLAYWRIGHT_ENGINES`.
                Unknown names fall back to ``camoufox``.
            viewport: Page viewport as ``(width, height)``.
            navigation_timeout_ms: Default navigation timeout of new pages.
            user_agent: Optional user-agent override for new pages.
        """
        engine = (engine or "camoufox").lower()
        if engine != "camoufox" and engine not in PLAYWRIGHT_ENGINES:
            logger.warning(
                "Unknown browser engine '%s', defaulting to camoufox", engine,
            )
            engine = "camoufox"
        self.headless = headless
        self.engine = engine
        self.viewport = viewport
        self.navigation_timeout_ms = navigation_timeout_ms
        self.user_agent = user_agent

    def _page_options(self) -> Dict[str, Any]:
        width, height = self.viewport
        options: Dict[str, Any] = {
            "viewport": {"width": width, "height": height},
        }
        if self.user_agent:
            options["user_agent"] = self.user_agent
        return options

    async def _launch(self) -> Tuple[Browser, Callable[[], Awaitable[None]]]:
        """Start the configured engine.

        Returns:
            ``(browser, shutdown)`` where *shutdown* releases the browser
            process and, for stock engines, the Playwright driver.
        """
        if self.engine == "camoufox":
            kwargs: Dict[str, Any] = {"headless": self.headless}
            if self.headless:
                # Headless auto-detection reports 1024x768, which has few
                # matching fingerprints.
                kwargs["screen"] = Screen(max_width=1920, max_height=1080)
            camoufox = AsyncCamoufox(**kwargs)
            browser = await camoufox.__aenter__()

            async def shutdown_camoufox() -> None:
                await camoufox.__aexit__(None, None, None)

            return browser, shutdown_camoufox

        playwright = await async_playwright().start()
        try:
            launcher = getattr(playwright, self.engine)
            launch_kwargs: Dict[str, Any] = {"headless": self.headless}
            if self.engine == "chromium":
                launch_kwargs["args"] = CHROMIUM_ARGS
            browser = await launcher.launch(**launch_kwargs)
        except Exception:
            await playwright.stop()
            raise

        async def shutdown_playwright() -> None:
            try:
                await browser.close()
            finally:
                await playwright.stop()

        return browser, shutdown_playwright

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Page]:
        """Open a fresh browser and yield a new page in it.

        The browser is closed when the block exits, whether it finished
        normally or raised.  Errors while closing are logged, never
        raised, so they cannot hide the outcome of the attempt.

        Raises:
            BrowserSessionError: If the browser or page cannot be created.
        """
        logger.debug(
            "Launching %s (Headless: %s)...", self.engine, self.headless,
        )
        try:
            browser, shutdown = await self._launch()
        except Exception as e:
            raise BrowserSessionError(
                f"Failed to launch {self.engine}: {e}"
            ) from e

        try:
            try:
                page = await browser.new_page(**self._page_options())
                page.set_default_navigation_timeout(self.navigation_timeout_ms)
            except Exception as e:
                raise BrowserSessionError(f"Failed to open page: {e}") from e
            yield page
        finally:
            try:
                await shutdown()
                logger.debug("Browser closed.")
            except Exception as e:
                logger.debug("Error during browser exit: %s", e)
