"""Logging configuration for the faucet claimer.

Sets up a dual-handler logging pipeline:

1. **Console** -- :class:`SafeStreamHandler` that never lets an
   encoding problem crash a claim loop.
2. **File** -- :class:`CompressedRotatingFileHandler` writing to
   ``logs/faucet_claimer.log`` under the project root with gzip rotation
   (10 MiB per file, 5 backups).

Per-wallet messages go through :class:`WalletLogAdapter`, which prefixes
every line with the wallet label.

Usage::

    from core.logging_setup import setup_logging
    setup_logging("DEBUG")
"""

import gzip
import logging
import os
import shutil
import sys
from logging.handlers import RotatingFileHandler
from typing import Any, MutableMapping, Tuple

from core.config import LOGS_DIR

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s - %(message)s'
LOG_FILE = str(LOGS_DIR / "faucet_claimer.log")


class CompressedRotatingFileHandler(RotatingFileHandler):
    """RotatingFileHandler that gzip-compresses rotated log files."""

    def rotation_filename(self, default_name: str) -> str:
        return f"{default_name}.gz"

    def rotate(self, source: str, dest: str) -> None:
        """Compress *source* into *dest* and remove *source*."""
        with open(source, 'rb') as f_in:
            with gzip.open(dest, 'wb') as f_out:
                shutil.copyfileobj(f_in, f_out)
        os.remove(source)


class SafeStreamHandler(logging.StreamHandler):
    """StreamHandler that degrades unencodable characters instead of failing.

    Consoles with a narrow code page cannot print every character a
    faucet page may echo back.  On :exc:`UnicodeEncodeError` the message
    is re-encoded with replacement characters.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            stream = self.stream
            try:
                stream.write(msg + self.terminator)
            except UnicodeEncodeError:
                encoding = getattr(stream, "encoding", None) or "ascii"
                safe_msg = msg.encode(
                    encoding, errors='replace',
                ).decode(encoding)
                stream.write(safe_msg + self.terminator)
            self.flush()
        except Exception:
            self.handleError(record)


class WalletLogAdapter(logging.LoggerAdapter):
    """Prefix log messages with ``[label]`` of the wallet being claimed."""

    def __init__(self, logger: logging.Logger, label: str) -> None:
        super().__init__(logger, {"wallet": label})
        self.label = label

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any],
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.label}] {msg}", kwargs


def setup_logging(log_level: str = "INFO", log_file: str = LOG_FILE) -> None:
    """Configure the root logger with console and file handlers.

    Args:
        log_level: Logging level name (e.g. ``"DEBUG"``, ``"INFO"``).
            Unknown names fall back to ``INFO``.
        log_file: Path of the rotating log file; its directory is
            created if missing.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    file_handler = CompressedRotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding='utf-8',
    )
    stream_handler = SafeStreamHandler(sys.stdout)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[file_handler, stream_handler],
    )
