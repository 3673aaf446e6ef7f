"""
Browser module for the faucet claimer.

Provides :class:`BrowserManager`, which opens one isolated browser session
per claim attempt (Camoufox by default, or a stock Playwright engine) and
guarantees the browser is closed again on every exit path.

Submodules:
    instance: ``BrowserManager`` class.
"""

from .instance import BrowserManager

__all__ = ["BrowserManager"]
