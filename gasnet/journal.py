"""Append-only journal of user-visible actions.

The journal is a human-readable record of what was done to a network (pipes
added, stations connected, flows computed), one line per action. It is
separate from diagnostic logging: records go only to the journal file and
never to the console, whatever the package log level is.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

from gasnet.config import ENGINE_CONFIG
from gasnet.logging import get_logger

LOGGER = get_logger(__name__)

JOURNAL_FORMAT = "%(asctime)s - %(message)s"


class ActionJournal:
    """Append action records to a text file.

    The file is opened lazily on the first record, in append mode, so a
    journal that records nothing leaves no file behind.

    Args:
        path: Journal file path (default from ``ENGINE_CONFIG.journal_path``).
        encoding: File encoding (default from ``ENGINE_CONFIG.journal_encoding``).
        enabled: If False, records are dropped and no file is touched.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        encoding: Optional[str] = None,
        enabled: bool = True,
    ) -> None:
        self.enabled = enabled
        self.path = Path(path if path is not None else ENGINE_CONFIG.journal_path)
        self.encoding = encoding or ENGINE_CONFIG.journal_encoding
        self._handler: Optional[logging.FileHandler] = None
        self._held: Optional[List[logging.LogRecord]] = None

    def _get_handler(self) -> logging.FileHandler:
        if self._handler is None:
            handler = logging.FileHandler(
                self.path, mode="a", encoding=self.encoding, delay=True
            )
            handler.setFormatter(logging.Formatter(JOURNAL_FORMAT))
            self._handler = handler
        return self._handler

    def record(self, message: str, *args: object) -> None:
        """Append one action line; ``args`` are %-formatted into ``message``.

        While the journal is held the line is kept back until :meth:`commit`.
        """
        entry = logging.makeLogRecord(
            {
                "name": "gasnet.journal",
                "levelno": logging.INFO,
                "levelname": "INFO",
                "msg": message,
                "args": args,
            }
        )
        if self._held is not None:
            self._held.append(entry)
        elif self.enabled:
            self._get_handler().handle(entry)
        LOGGER.debug("Journal: %s", entry.getMessage())

    def hold(self) -> None:
        """Keep subsequent records back until :meth:`commit` or :meth:`discard`."""
        if self._held is None:
            self._held = []

    def commit(self) -> None:
        """Write the held records, in order, and stop holding."""
        held, self._held = self._held or [], None
        if self.enabled:
            for entry in held:
                self._get_handler().handle(entry)

    def discard(self) -> None:
        """Drop the held records and stop holding."""
        if self._held:
            LOGGER.debug("Discarded %d journal records", len(self._held))
        self._held = None

    def close(self) -> None:
        self.discard()
        if self._handler is not None:
            self._handler.close()
            self._handler = None

    def __enter__(self) -> ActionJournal:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
