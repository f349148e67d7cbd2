"""
Message service: stamps new messages and serves the recent-messages view.
"""

import logging
from datetime import datetime, timezone
from typing import List

from fastapi import Depends
from sqlalchemy.orm import Session

from message_board.storage import MessageStore, get_db

logger = logging.getLogger(__name__)


# Only this many messages are ever returned
RECENT_MESSAGES_LIMIT = 10


def utc_timestamp() -> str:
    """Current UTC time as a fixed-width ISO-8601 string with a Z suffix."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class MessageService:

    def __init__(self, store: MessageStore):
        self.store = store

    def post_message(self, content: str):
        """
        Timestamp and persist a message.

        Content must already be validated by the caller.
        """
        timestamp = utc_timestamp()
        logger.debug(f"Assigned timestamp {timestamp} to new message")
        return self.store.insert(content=content, timestamp=timestamp)

    def list_recent_messages(self) -> List:
        return self.store.fetch_latest(RECENT_MESSAGES_LIMIT)


def get_message_service(db: Session = Depends(get_db)) -> MessageService:
    """Dependency building a MessageService over the request's session."""
    return MessageService(MessageStore(db))
