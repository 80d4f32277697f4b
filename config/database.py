"""
Database Configuration and Management (SQLAlchemy)

Handles engine setup, sessions and schema initialization using SQLAlchemy ORM.
"""

import shutil
import logging
from pathlib import Path
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from config.models import Base
from config.settings import DEFAULT_DB_PATH, PROJECT_ROOT

logger = logging.getLogger(__name__)

BACKUP_DIR = PROJECT_ROOT / "backups"
DEFAULT_DATABASE_URL = f"sqlite:///{DEFAULT_DB_PATH}"

# SQLAlchemy Engine and Session
engine = None
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False)

def configure_database(database_url=DEFAULT_DATABASE_URL):
    """
    Create the engine for the given URL and bind the session factory to it.

    Args:
        database_url (str): SQLAlchemy database URL

    Returns:
        sqlalchemy.engine.Engine: The configured engine
    """
    global engine

    url = make_url(database_url)
    engine_kwargs = {}

    if url.get_backend_name() == "sqlite":
        # The dispatcher sweeps from a scheduler thread
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            # Share the single in-memory database across sessions
            engine_kwargs["poolclass"] = StaticPool
        else:
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    if engine is not None:
        engine.dispose()

    engine = create_engine(url, echo=False, **engine_kwargs)
    SessionLocal.configure(bind=engine)
    logger.info(f"Database configured: {url.render_as_string(hide_password=True)}")
    return engine

def get_db_session():
    """
    Get a new database session.

    Returns:
        sqlalchemy.orm.Session: Database session
    """
    if engine is None:
        configure_database()
    return SessionLocal()

def init_database():
    """
    Create all tables defined in the models if they don't exist.
    """
    if engine is None:
        configure_database()

    logger.info("Initializing database...")
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database initialized successfully!")
    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        raise

def backup_database():
    """
    Create a backup copy of a file-based SQLite database.

    Returns:
        str or None: Path of the backup file, None if nothing was copied
    """
    if engine is None or engine.url.get_backend_name() != "sqlite":
        logger.warning("Backups are only supported for SQLite databases")
        return None

    db_path = Path(engine.url.database or "")
    if not engine.url.database or not db_path.exists():
        logger.warning("Database file does not exist, cannot create backup")
        return None

    BACKUP_DIR.mkdir(exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = BACKUP_DIR / f"{db_path.stem}_backup_{timestamp}.db"

    try:
        shutil.copy2(db_path, backup_path)
        logger.info(f"Database backed up to: {backup_path}")
        return str(backup_path)
    except OSError as e:
        logger.error(f"Error creating backup: {e}")
        return None
