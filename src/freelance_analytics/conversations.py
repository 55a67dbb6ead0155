"""Conversation partner lookup for the messaging inbox."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from freelance_analytics.models import Message, Profile

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _sent_at(message: Message) -> datetime:
    ts = message.sent_at
    if ts is None:
        return _EPOCH
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def conversation_partners(messages: Iterable[Message], current_user_id: str) -> list[Profile]:
    """Return the distinct users `current_user_id` has exchanged messages with.

    Partners are ordered by their most recent message, newest first. Messages
    not involving the user, or whose counterpart profile is missing, are
    ignored.

    Raises:
        ValueError: if `current_user_id` is empty.
    """
    if not current_user_id:
        raise ValueError("current_user_id is required")

    partners: dict[str, Profile] = {}
    for msg in sorted(messages, key=_sent_at, reverse=True):
        if msg.sender_id == current_user_id and msg.receiver is not None:
            partner_id, profile = msg.receiver_id, msg.receiver
        elif msg.receiver_id == current_user_id and msg.sender is not None:
            partner_id, profile = msg.sender_id, msg.sender
        else:
            continue
        partners.setdefault(partner_id, profile)
    return list(partners.values())
