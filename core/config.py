"""Application configuration for the faucet claimer.

Central configuration module powered by Pydantic v2.  Settings are loaded from
environment variables (with ``.env`` file support) and an optional
``config/faucet_config.json`` file.  With neither present, the built-in
defaults target the Humanity testnet faucet with two wallets every 90 seconds.

Key exports:
    BotSettings: Root settings model (instantiate once at startup).
    WalletProfile: One configured wallet (label + address).
    ClaimConfig: Immutable per-wallet input of a claim loop.
    BASE_DIR / CONFIG_DIR / LOGS_DIR / DEBUG_DIR: Canonical project paths.
"""

# pylint: disable=no-member

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Base Paths
# ---------------------------------------------------------------------------
BASE_DIR: Path = Path(__file__).parent.parent
"""Project root directory (parent of ``core/``)."""

CONFIG_DIR: Path = BASE_DIR / "config"
"""Directory containing the optional ``faucet_config.json``."""

LOGS_DIR: Path = BASE_DIR / "logs"
"""Directory for log output files."""

DEBUG_DIR: Path = BASE_DIR / "debug-artifacts"
"""Default directory for failure screenshots and HTML snapshots."""

DEFAULT_FAUCET_URL = "https://faucet.testnet.humanity.org/"
DEFAULT_CLAIM_INTERVAL_MS = 90 * 1000

logger: logging.Logger = logging.getLogger(__name__)


class WalletProfile(BaseModel):
    """A wallet the claimer requests funds for.

    Attributes:
        label: Identifier used in log lines and artifact file names.
        address: Wallet address typed into the faucet form.
        enabled: Set to ``False`` to skip this wallet.
    """

    label: str
    address: str
    enabled: bool = True


class ClaimConfig(BaseModel):
    """Immutable input of one claim loop.

    Attributes:
        label: Identifier for logs and debug artifacts.
        target_url: Faucet page to open.
        wallet_address: Address entered into the faucet's text input.
        interval_ms: Milliseconds between scheduled attempts.
    """

    model_config = ConfigDict(frozen=True)

    label: str = Field(min_length=1)
    target_url: str = Field(min_length=1)
    wallet_address: str = Field(min_length=1)
    interval_ms: int = Field(default=DEFAULT_CLAIM_INTERVAL_MS, ge=0)

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000


def _default_wallets() -> List[WalletProfile]:
    return [
        WalletProfile(
            label="Wallet 1",
            address="0xEDf4364Ca6AA3e6702DaB8b16eb63cc61B649EDD",
        ),
        WalletProfile(
            label="Wallet 2",
            address="0x1DCb5a1C5FA7571860926fF8F09ea959c49D3461",
        ),
    ]


class BotSettings(BaseSettings):
    """Root configuration model for the faucet claimer.

    All fields can be set via environment variables or a ``.env`` file
    (``FAUCET_URL``, ``CLAIM_INTERVAL_MS``, ``WALLETS`` as a JSON list,
    ...).  Wallets listed in ``config/faucet_config.json`` are merged in
    during post-init.

    Section overview:
        * **Core** -- log level, browser engine and visibility.
        * **Faucet** -- target URL, claim interval, wallets.
        * **Timeouts** -- per-step bounds of a claim attempt.
        * **Artifacts** -- where failure diagnostics are written.
    """

    # Core
    log_level: str = "INFO"
    # The faucet is usually watched while it runs, so default to visible
    headless: bool = False
    # Options: camoufox, chromium, firefox, webkit
    browser_engine: str = "camoufox"
    viewport_width: int = 1280
    viewport_height: int = 800
    user_agent: Optional[str] = None

    # Faucet
    faucet_url: str = DEFAULT_FAUCET_URL
    claim_interval_ms: int = Field(default=DEFAULT_CLAIM_INTERVAL_MS, ge=0)
    wallets: List[WalletProfile] = Field(default_factory=_default_wallets)

    # Timeouts (ms)
    navigation_timeout_ms: int = 60000
    input_timeout_ms: int = 15000
    button_timeout_ms: int = 15000
    confirmation_timeout_ms: int = 20000
    post_click_delay_ms: int = 1000
    # Per-keystroke delay when typing the address
    typing_delay_ms: int = 30

    # Artifacts
    debug_dir: str = str(DEBUG_DIR)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Merge wallets from ``config/faucet_config.json``."""
        self._load_faucet_config_defaults()

    def _load_faucet_config_defaults(self) -> None:
        """Load extra wallets and overrides from the config file.

        Reads ``config/faucet_config.json``.  Wallets whose address is
        already configured are *not* added twice.  ``faucet_url`` and
        ``claim_interval_ms`` are applied only when the JSON file
        provides them.
        """
        config_path: Path = CONFIG_DIR / "faucet_config.json"
        if not config_path.exists():
            return

        try:
            data: Dict[str, Any] = json.loads(
                config_path.read_text(encoding="utf-8")
            )
        except Exception as exc:
            logger.warning(
                "Failed to load faucet_config.json: %s", exc
            )
            return

        if data.get("faucet_url"):
            self.faucet_url = str(data["faucet_url"])
        if data.get("claim_interval_ms") is not None:
            try:
                interval = int(data["claim_interval_ms"])
            except (TypeError, ValueError):
                logger.warning(
                    "Ignoring invalid claim_interval_ms in "
                    "faucet_config.json: %r",
                    data["claim_interval_ms"],
                )
            else:
                if interval >= 0:
                    self.claim_interval_ms = interval

        wallets_data = data.get("wallets", [])
        if not isinstance(wallets_data, list):
            return

        known = {w.address.lower() for w in self.wallets}
        for entry in wallets_data:
            if not isinstance(entry, dict):
                continue
            address = entry.get("address")
            if not isinstance(address, str) or not address.strip():
                logger.debug("Skipping wallet entry without a valid address: %r", entry)
                continue
            if address.lower() in known:
                continue
            label = entry.get("label") or f"Wallet {len(self.wallets) + 1}"
            try:
                self.wallets.append(
                    WalletProfile(
                        label=label,
                        address=address,
                        enabled=entry.get("enabled", True),
                    )
                )
            except Exception as exc:
                logger.debug(
                    "Skipping invalid wallet entry %r: %s", entry, exc
                )
                continue
            known.add(address.lower())

    def get_claim_configs(self) -> List[ClaimConfig]:
        """Return one :class:`ClaimConfig` per enabled wallet."""
        return [
            ClaimConfig(
                label=wallet.label,
                target_url=self.faucet_url,
                wallet_address=wallet.address,
                interval_ms=self.claim_interval_ms,
            )
            for wallet in self.wallets
            if wallet.enabled
        ]

    def filter_wallets(self, label: str) -> List[WalletProfile]:
        """Return wallets whose label contains *label* (case-insensitive)."""
        target = label.lower().strip()
        return [w for w in self.wallets if target in w.label.lower()]
