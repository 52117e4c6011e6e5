"""
Subscription registry: (channel, food query) pairs that get a daily report.
Kept in memory in insertion order and mirrored to a flat text file, which is
rewritten in full after every mutation.

File format, one subscription per line:
    <platform> <channel-address> <food query...>
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dining_bot.channels import Channel, parse_channel
from dining_bot.errors import ListenerFileError, PersistenceError

logger = logging.getLogger(__name__)


def normalize_query(query: str) -> str:
    """Collapse runs of whitespace, newlines included, to single spaces"""
    return " ".join(query.split())


@dataclass(frozen=True)
class Subscription:
    """A channel's standing request for one food"""
    channel: Channel
    query: str

    def encode(self) -> str:
        return f"{self.channel.encode()} {self.query}"


def parse_line(line: str, path: str = "<listeners>", line_number: int = 0) -> Subscription:
    """
    Parse one listener line.

    Raises:
        ListenerFileError: Too few fields, unknown platform or non-numeric address
    """
    sections = line.split(" ", 2)
    if len(sections) < 3 or not sections[2].strip():
        raise ListenerFileError(path, line_number, line, "expected '<platform> <address> <query>'")
    platform, address, query = sections
    try:
        channel = parse_channel(platform, address)
    except ValueError as e:
        raise ListenerFileError(path, line_number, line, str(e)) from e
    return Subscription(channel, query)


class SubscriptionRegistry:
    """Lock-protected, file-backed list of subscriptions"""

    def __init__(self, path: str, subscriptions: Optional[List[Subscription]] = None):
        self.path = path
        self._subscriptions: List[Subscription] = list(subscriptions or [])
        self._lock = asyncio.Lock()

    @classmethod
    def load(cls, path: str) -> "SubscriptionRegistry":
        """
        Read the listener file, creating it empty if it doesn't exist.

        Raises:
            ListenerFileError: If any non-blank line is corrupt
        """
        file_path = Path(path)
        if not file_path.exists():
            logger.info(f"No listener file at {path}, starting with no subscriptions")
            file_path.touch()
            return cls(path)

        subscriptions = []
        for line_number, line in enumerate(file_path.read_text(encoding="utf-8").split("\n"), start=1):
            line = line.rstrip("\r")
            if not line.strip():
                continue
            subscriptions.append(parse_line(line, path, line_number))

        logger.info(f"Loaded {len(subscriptions)} subscription(s) from {path}")
        return cls(path, subscriptions)

    def __len__(self) -> int:
        return len(self._subscriptions)

    async def add(self, channel: Channel, query: str) -> bool:
        """
        Subscribe a channel to a food. Returns False if it was already subscribed.

        Raises:
            PersistenceError: The file write failed; the in-memory add stands
        """
        subscription = Subscription(channel, normalize_query(query))
        async with self._lock:
            if subscription in self._subscriptions:
                logger.info(f"{channel.encode()} is already listening for {query!r}")
                return False
            self._subscriptions.append(subscription)
            logger.info(f"Added listener {subscription.encode()!r}")
            self._save_locked()
        return True

    async def remove_if_present(self, channel: Channel, query: str) -> bool:
        """
        Remove the subscription if present. The file is only rewritten on removal.

        Raises:
            PersistenceError: The file write failed; the in-memory removal stands
        """
        subscription = Subscription(channel, normalize_query(query))
        async with self._lock:
            if subscription not in self._subscriptions:
                return False
            self._subscriptions.remove(subscription)
            logger.info(f"Removed listener {subscription.encode()!r}")
            self._save_locked()
        return True

    async def save(self) -> None:
        async with self._lock:
            self._save_locked()

    async def snapshot(self) -> List[Subscription]:
        """Copy of the current subscriptions, safe to iterate without the lock"""
        async with self._lock:
            return list(self._subscriptions)

    def _save_locked(self) -> None:
        lines = [sub.encode() for sub in self._subscriptions]
        broken = [line for line in lines if "\n" in line or "\r" in line]
        if broken:
            raise PersistenceError(f"Refusing to write multi-line listener entry {broken[0]!r}")
        contents = "\n".join(lines)
        tmp_path = f"{self.path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(contents)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Couldn't write listener file {self.path}: {e}")
            raise PersistenceError(f"Couldn't write {self.path}: {e}") from e
