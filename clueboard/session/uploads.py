"""
Upload Channels - Sequencing for asynchronous file reads.

Each upload control owns one channel. Starting a new read supersedes
any read still in flight; when the older read finishes its text is
ignored rather than applied after the newer one.
"""

from __future__ import annotations
import logging


logger = logging.getLogger(__name__)


class UploadChannel:
    """
    Accepts only the result of the most recent read.

    Usage:
        channel = UploadChannel("game-upload")
        ticket = channel.begin()
        ...  # read the file
        if channel.deliver(ticket, text):
            handle(text)
    """

    def __init__(self, name: str):
        self.name = name
        self._latest = 0
        self._delivered = 0

    @property
    def pending(self) -> bool:
        """True while the latest read has not been delivered."""
        return self._latest > self._delivered

    def begin(self) -> int:
        """Start a read and return its ticket."""
        self._latest += 1
        return self._latest

    def deliver(self, ticket: int, text: str) -> bool:
        """
        Offer a finished read.

        Returns True if the caller should apply the text.
        """
        if ticket != self._latest or ticket <= self._delivered:
            logger.debug(
                "Ignoring stale read on %s (ticket %d, latest %d, %d chars)",
                self.name, ticket, self._latest, len(text),
            )
            return False
        self._delivered = ticket
        return True
