"""
JSON-file store for the last passing attempt of every wallet
"""
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)


class AttemptStore:
    """
    Wallet -> last-pass timestamp (ms since epoch), backed by one JSON file

    The whole mapping is rewritten on every mutation; there is no append log
    and records never expire. Wallet keys are stored exactly as supplied.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._attempts: Dict[str, int] = {}
        self._write_lock = threading.Lock()
        self.loaded = False

    def load(self) -> None:
        """
        Read the backing file, creating it as ``{}`` when absent

        Raises:
            ValueError: if the file does not hold a JSON object
        """
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._write({})
            self._attempts = {}
            logger.info(f"Created attempts file at {self.path}")
        else:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError(f"Attempts file {self.path} must contain a JSON object")
            self._attempts = {str(wallet): int(ts) for wallet, ts in data.items()}
            logger.info(f"Loaded {len(self._attempts)} attempt records from {self.path}")
        self.loaded = True

    def get(self, wallet: str) -> Optional[int]:
        return self._attempts.get(wallet)

    def record_pass(self, wallet: str, timestamp: int) -> None:
        """
        Upsert a wallet's pass time and flush the full mapping to disk

        The in-memory mapping only changes once the file write succeeded.

        Raises:
            OSError: if the file could not be written
        """
        with self._write_lock:
            updated = dict(self._attempts)
            updated[wallet] = int(timestamp)
            self._write(updated)
            self._attempts = updated
        logger.info(f"Updated {self.path.name} for {wallet[:6]}...")

    def _write(self, data: Dict[str, int]) -> None:
        fd, tmp_path = tempfile.mkstemp(
            dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def __contains__(self, wallet: str) -> bool:
        return wallet in self._attempts

    def __len__(self) -> int:
        return len(self._attempts)
