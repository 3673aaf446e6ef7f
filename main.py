"""
Faucet Claimer - Main Entry Point

Opens the faucet page for every configured wallet, submits the wallet
address and repeats on a fixed timer until the process is stopped.  Each
wallet runs as its own independent claim loop.

Usage:
    python main.py                    # Claim for all wallets, forever
    python main.py --visible          # Force a visible browser window
    python main.py --once             # One attempt per wallet, then exit
    python main.py --wallet "Wallet 2"  # Only wallets whose label matches
"""
from dotenv import load_dotenv

# Load environment variables from .env file into os.environ
load_dotenv()

import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional

from browser.instance import BrowserManager
from core.artifacts import DebugArtifactWriter
from core.config import BotSettings, ClaimConfig
from core.logging_setup import setup_logging
from core.scheduler import ClaimLoop, run_claim_loops
from faucets.base import FaucetClaimer

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Recurring testnet faucet claimer")
    parser.add_argument("--visible", action="store_true", help="Show browser")
    parser.add_argument("--headless", action="store_true", help="Hide browser")
    parser.add_argument("--once", action="store_true", help="Run one attempt per wallet and exit")
    parser.add_argument("--wallet", type=str, help="Run only wallets whose label contains this text")
    return parser.parse_args(argv)


def select_configs(settings: BotSettings, wallet: Optional[str]) -> List[ClaimConfig]:
    """Claim configs for the enabled wallets, optionally filtered by label."""
    configs = settings.get_claim_configs()
    if wallet:
        wanted = {w.label for w in settings.filter_wallets(wallet)}
        configs = [c for c in configs if c.label in wanted]
    return configs


def build_claimer(settings: BotSettings) -> FaucetClaimer:
    browser_manager = BrowserManager(
        headless=settings.headless,
        engine=settings.browser_engine,
        viewport=(settings.viewport_width, settings.viewport_height),
        navigation_timeout_ms=settings.navigation_timeout_ms,
        user_agent=settings.user_agent,
    )
    artifact_writer = DebugArtifactWriter(settings.debug_dir)
    return FaucetClaimer(settings, browser_manager, artifact_writer)


def exit_code(loops: List[ClaimLoop]) -> int:
    """0 when every finished attempt succeeded, 1 otherwise."""
    if not loops:
        return 1
    return 0 if all(loop.failures == 0 and loop.runs > 0 for loop in loops) else 1


async def main(argv: Optional[List[str]] = None) -> int:
    """
    Main execution loop.

    1. Parses command line arguments.
    2. Loads settings and sets up logging.
    3. Builds the claimer (browser manager + debug artifact writer).
    4. Runs one claim loop per wallet until SIGTERM / Ctrl-C
       (or after one attempt each with ``--once``).
    """
    args = parse_args(argv)

    settings = BotSettings()
    if args.visible:
        settings.headless = False
    if args.headless:
        settings.headless = True

    setup_logging(settings.log_level)

    configs = select_configs(settings, args.wallet)
    if not configs:
        if args.wallet:
            logger.warning(f"No wallets found matching '{args.wallet}'")
        else:
            logger.warning("No enabled wallets configured.")
        return 1

    claimer = build_claimer(settings)
    stop_signal = asyncio.Event()

    def handle_sigterm():
        logger.info("Received SIGTERM. Finishing running attempts and stopping...")
        stop_signal.set()

    loop = asyncio.get_running_loop()
    if sys.platform != "win32":
        loop.add_signal_handler(signal.SIGTERM, handle_sigterm)

    logger.info(
        f"Claiming {settings.faucet_url} for {len(configs)} wallet(s) "
        f"every {settings.claim_interval_ms / 1000:g} seconds"
    )
    loops = await run_claim_loops(
        configs,
        claimer.claim,
        max_runs=1 if args.once else None,
        stop_event=stop_signal,
    )
    return exit_code(loops)


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Stopping faucet claimer (KeyboardInterrupt)...")
