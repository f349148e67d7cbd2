"""
SQLAlchemy ORM models for database tables.

For Pydantic request/response schemas, see schemas.py.
"""

from sqlalchemy import Column, Integer, String, Text

from message_board.storage import Base


class Message(Base):
    """
    SQLAlchemy model for posted messages.

    Table: messages
    Primary Key: id (assigned by the database on insert)
    """
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content = Column(Text, nullable=False)
    timestamp = Column(String, nullable=False, index=True)  # ISO-8601 UTC, microseconds
