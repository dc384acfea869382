# barbot/journal/decision_log.py
"""Append-only NDJSON log of every decision taken during a run."""
import asyncio
import json
import logging
from pathlib import Path

import aiofiles

from barbot.journal.models import DecisionRecord


logger = logging.getLogger(__name__)


class DecisionLog:
    """Writes one JSON line per decision and flushes it before returning.

    The file is opened in append mode and never rewritten. A record that
    fails to serialize or write is logged and skipped; it never stops the
    caller.
    """

    def __init__(self, path: str | Path, run_id: str) -> None:
        """Initialize the decision log.

        Args:
            path: File to append to. Created if missing.
            run_id: Identifier of the current run.
        """
        self._path = Path(path)
        self._run_id = run_id
        self._file = None
        self._lock = asyncio.Lock()

    @property
    def run_id(self) -> str:
        """Return the run identifier this log was opened for."""
        return self._run_id

    @property
    def path(self) -> Path:
        """Return the log file path."""
        return self._path

    async def open(self) -> None:
        """Open the log file for appending.

        Raises:
            OSError: If the file cannot be opened.
        """
        async with self._lock:
            if self._file is None:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._file = await aiofiles.open(self._path, "a")

    async def append(self, record: DecisionRecord) -> bool:
        """Append a record as a single line.

        Returns:
            True if the line was written and flushed, False otherwise.
        """
        try:
            line = json.dumps(record.to_dict()) + "\n"
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to serialize decision: {e}")
            return False

        async with self._lock:
            if self._file is None:
                logger.error("Decision log is not open; dropping record")
                return False
            try:
                await self._file.write(line)
                await self._file.flush()
            except OSError as e:
                logger.error(f"Failed to write decision: {e}")
                return False
        return True

    async def close(self) -> None:
        """Flush and close the file. Calling it again is a no-op.

        Raises:
            OSError: If the final flush or close fails.
        """
        async with self._lock:
            if self._file is None:
                return
            file, self._file = self._file, None
            try:
                await file.flush()
            finally:
                await file.close()

    async def __aenter__(self) -> "DecisionLog":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
