"""Debug artifacts captured when a claim attempt fails.

A failed attempt leaves behind a full-page screenshot and the page HTML,
named after the wallet label and the moment of failure, e.g.::

    debug-artifacts/Wallet-1-error-2024-05-01T10-00-00-123Z.png
    debug-artifacts/Wallet-1-page-2024-05-01T10-00-00-123Z.html

Saving is best-effort: errors are logged and never raised, so a broken
page cannot turn a diagnosed failure into a crash.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


@dataclass
class DebugArtifacts:
    """Paths written for one failure; ``None`` where the save failed."""

    screenshot_path: Optional[Path] = None
    html_path: Optional[Path] = None


def artifact_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with ``:`` and ``.`` replaced by ``-``."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    iso = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    iso = iso.replace("+00:00", "Z")
    return iso.replace(":", "-").replace(".", "-")


def safe_label(label: str) -> str:
    """Make a wallet label usable inside a file name."""
    cleaned = _UNSAFE_CHARS.sub("-", label.strip()).strip("-")
    return cleaned or "wallet"


class DebugArtifactWriter:
    """Writes screenshot + HTML pairs into ``debug_dir``.

    The directory is created on construction and again before each save.
    A pair never overwrites files of an earlier failure: when the
    timestamped names are taken, a ``-1``, ``-2``, ... suffix is added.
    """

    def __init__(self, debug_dir: Union[str, Path]) -> None:
        self.debug_dir = Path(debug_dir)
        # Last pair handed out per label, so two failures in the same
        # millisecond get distinct names before either is written
        self._last_reserved: Dict[str, Path] = {}
        self._ensure_dir()

    def _ensure_dir(self) -> None:
        if not self.debug_dir.exists():
            self.debug_dir.mkdir(parents=True, exist_ok=True)
            logger.info("Created debug folder: %s", self.debug_dir)

    def artifact_paths(
        self, label: str, now: Optional[datetime] = None,
    ) -> Tuple[Path, Path]:
        """Reserve and return ``(screenshot_path, html_path)`` for *label*."""
        name = safe_label(label)
        base = f"{name}-{{kind}}-{artifact_timestamp(now)}"
        counter = 0
        while True:
            suffix = f"-{counter}" if counter else ""
            png = self.debug_dir / (base.format(kind="error") + f"{suffix}.png")
            html = self.debug_dir / (base.format(kind="page") + f"{suffix}.html")
            if png != self._last_reserved.get(name) and not png.exists() and not html.exists():
                self._last_reserved[name] = png
                return png, html
            counter += 1

    async def save(
        self, page: Any, label: str, now: Optional[datetime] = None,
    ) -> DebugArtifacts:
        """Capture a full-page screenshot and the HTML of *page*.

        Args:
            page: Playwright ``Page`` (``None`` when the browser never
                opened; nothing is written then).
            label: Wallet label used in the file names.
            now: Failure time; defaults to the current UTC time.

        Returns:
            :class:`DebugArtifacts` with the paths actually written.
        """
        result = DebugArtifacts()
        if page is None:
            return result

        try:
            self._ensure_dir()
        except OSError as e:
            logger.error("[%s] Failed to create debug folder %s: %s", label, self.debug_dir, e)
            return result

        screenshot_path, html_path = self.artifact_paths(label, now)

        try:
            await page.screenshot(path=str(screenshot_path), full_page=True)
            result.screenshot_path = screenshot_path
            logger.info("[%s] Saved screenshot to %s", label, screenshot_path)
        except Exception as e:
            logger.error("[%s] Failed to save screenshot: %s", label, e)

        try:
            html = await page.content()
            html_path.write_text(html, encoding="utf-8")
            result.html_path = html_path
            logger.info("[%s] Saved page HTML to %s", label, html_path)
        except Exception as e:
            logger.error("[%s] Failed to save page HTML: %s", label, e)

        return result
