from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any, Optional

import discord


def _response(status: int, reason: str) -> SimpleNamespace:
    return SimpleNamespace(status=status, reason=reason)


def not_found() -> discord.NotFound:
    return discord.NotFound(_response(404, "Not Found"), "Unknown Message")


def http_error(status: int = 500) -> discord.HTTPException:
    return discord.HTTPException(_response(status, "Error"), "boom")


class FakeUser:
    def __init__(self, user_id: int = 42, name: str = "tester", bot: bool = False):
        self.id = user_id
        self.name = name
        self.bot = bot


class FakeMessage:
    def __init__(
        self,
        message_id: int,
        channel: Optional["FakeChannel"] = None,
        content: str = "",
        author: Optional[FakeUser] = None,
        guild: Any = SimpleNamespace(id=1),
        channel_mentions: Optional[list] = None,
    ):
        self.id = message_id
        self.channel = channel
        self.content = content
        self.author = author or FakeUser()
        self.guild = guild
        self.channel_mentions = channel_mentions or []
        self.edits: list[str] = []
        self.reactions: list[str] = []
        self.replies: list[str] = []
        self.deleted = False
        self.edit_error: Optional[Exception] = None

    async def edit(self, content: Optional[str] = None, **kwargs):
        if self.edit_error is not None:
            raise self.edit_error
        self.edits.append(content)
        self.content = content

    async def delete(self):
        if self.deleted:
            raise not_found()
        self.deleted = True

    async def add_reaction(self, emoji):
        self.reactions.append(str(emoji))

    async def reply(self, text: str):
        self.replies.append(text)


class FakeChannel:
    def __init__(self, channel_id: int = 100, first_message_id: int = 1000):
        self.id = channel_id
        self.sent: list[FakeMessage] = []
        self.messages: dict[int, FakeMessage] = {}
        self._next_id = first_message_id
        self.send_error: Optional[Exception] = None

    async def send(self, content: Optional[str] = None, **kwargs):
        if self.send_error is not None:
            raise self.send_error
        self._next_id += 1
        message = FakeMessage(self._next_id, channel=self, content=content)
        self.sent.append(message)
        self.messages[message.id] = message
        return message

    async def fetch_message(self, message_id: int):
        message = self.messages.get(message_id)
        if message is None or message.deleted:
            raise not_found()
        return message


class FakeBot:
    """Just enough of discord.Client for the services under test."""

    def __init__(self, db=None, channels: Optional[list[FakeChannel]] = None):
        self.db = db
        self.channels = {c.id: c for c in channels or []}
        self.reaction: Optional[tuple[Any, Any]] = None
        self.wait_for_calls: list[dict] = []
        self.update_calls = 0
        self.presence: list[Any] = []

    def get_channel(self, channel_id: int):
        return self.channels.get(channel_id)

    async def fetch_channel(self, channel_id: int):
        channel = self.channels.get(channel_id)
        if channel is None:
            raise not_found()
        return channel

    async def wait_for(self, event: str, check=None, timeout: Optional[float] = None):
        self.wait_for_calls.append({"event": event, "timeout": timeout})
        if self.reaction is None:
            raise asyncio.TimeoutError()
        reaction, user = self.reaction
        if check is not None and not check(reaction, user):
            raise asyncio.TimeoutError()
        return reaction, user

    async def run_oc_update(self):
        self.update_calls += 1
        return None

    async def change_presence(self, **kwargs):
        self.presence.append(kwargs)


def reaction_on(message_id: int, emoji: str) -> SimpleNamespace:
    return SimpleNamespace(emoji=emoji, message=SimpleNamespace(id=message_id))
