"""
Core module for the faucet claimer.

Contains configuration, logging, error classification, debug artifacts and
the recurring claim loops.

Submodules:
    config: Settings (``BotSettings``, ``WalletProfile``, ``ClaimConfig``) via Pydantic.
    scheduler: ``ClaimLoop`` fixed-interval task and ``run_claim_loops``.
    errors: ``ClaimError`` hierarchy and ``ErrorType`` classification.
    artifacts: ``DebugArtifactWriter`` for failure screenshots and HTML.
    logging_setup: Compressed rotating file + safe console logging.
"""
