"""
Faucets module for the faucet claimer.

:class:`FaucetClaimer` (defined in ``base.py``) performs one claim attempt
against a faucet page: navigate, type the wallet address, click the
"Request" button and wait for confirmation.  Results are returned as
:class:`ClaimResult` dataclasses.

Submodules:
    base: ``FaucetClaimer`` claim procedure, ``ClaimResult`` dataclass.
    dom: Pure matching rules (Request button, success text) and in-page scripts.
"""

from .base import ClaimResult, FaucetClaimer

__all__ = [
    "ClaimResult",
    "FaucetClaimer",
]
