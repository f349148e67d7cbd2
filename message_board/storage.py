import logging
from typing import Generator, List

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session, declarative_base

from message_board.config import settings
from message_board.errors import StorageError

logger = logging.getLogger(__name__)


def _connect_args(database_url: str) -> dict:
    # check_same_thread=False is required for SQLite to work with FastAPI's async
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args(settings.DATABASE_URL),
    echo=False,
)

# Create SessionLocal class for creating database sessions
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for SQLAlchemy models
Base = declarative_base()


def init_db() -> None:
    """
    Initialize the database by creating all tables.
    Called during application startup.
    """
    logger.debug(f"Initializing database with URL: {settings.DATABASE_URL}")
    try:
        # Import models to register them with Base.metadata
        from message_board.models import Message  # noqa: F401

        logger.debug("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


def get_db() -> Generator[Session, None, None]:
    """
    Dependency to get database session.
    Yields a session and ensures it's closed after use.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_health() -> bool:
    """
    Check if the database is reachable and schema is applied.

    Returns:
        True if DB is healthy and the messages table exists, False otherwise.
    """
    logger.debug("Checking database health...")
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            logger.debug("Database connectivity OK")

            if not inspect(conn).has_table("messages"):
                logger.error("Database schema not applied: 'messages' table not found")
                return False
        logger.debug("Database health check passed")
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False


# =============================================================================
# Message Store
# =============================================================================

class MessageStore:
    """
    Persistence adapter for messages.

    Wraps a single SQLAlchemy session. Ordering and concurrency guarantees
    come from the database; nothing here holds state between requests.
    """

    def __init__(self, db: Session):
        self.db = db

    def insert(self, content: str, timestamp: str):
        """
        Persist one message.

        Args:
            content: Message text, stored verbatim
            timestamp: Creation time (ISO-8601 UTC)

        Returns:
            The stored Message row with its generated id

        Raises:
            StorageError: if the database rejects the write or is unreachable
        """
        from message_board.models import Message

        logger.info(f"Inserting message: content_length={len(content)}, timestamp={timestamp}")

        try:
            message = Message(content=content, timestamp=timestamp)
            self.db.add(message)
            self.db.commit()
            self.db.refresh(message)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to insert message: {e}")
            raise StorageError("Failed to store message") from e

        logger.info(f"Message stored successfully: id={message.id}")
        return message

    def fetch_latest(self, limit: int) -> List:
        """
        Retrieve the most recent messages.

        Args:
            limit: Maximum number of messages to return

        Returns:
            Up to `limit` messages ordered by timestamp DESC, id DESC

        Raises:
            StorageError: if the database is unreachable or the read fails
        """
        from message_board.models import Message

        logger.info(f"Querying latest messages: limit={limit}")

        try:
            messages = (
                self.db.query(Message)
                .order_by(Message.timestamp.desc(), Message.id.desc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to query messages: {e}")
            raise StorageError("Failed to read messages") from e

        logger.info(f"Retrieved {len(messages)} messages")
        return messages
