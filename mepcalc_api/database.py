"""Calculation history database setup via SQLAlchemy."""
import os

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

load_dotenv()

# Default DB lives in data/ at the repository root (gitignored)
_DB_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")


def _default_database_url() -> str:
    os.makedirs(_DB_DIR, exist_ok=True)
    return f"sqlite:///{os.path.join(_DB_DIR, 'mepcalc.db')}"


def make_engine(url: str):
    """Engine for a database URL. SQLite connections may cross threads."""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


class Base(DeclarativeBase):
    pass


DATABASE_URL = os.getenv("MEPCALC_DATABASE_URL") or _default_database_url()

engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None):
    """Create all tables."""
    # Models register themselves on Base.metadata when imported
    import mepcalc_api.models_db  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)


def make_session_factory(url: str):
    """Session factory on a separate database, tables created."""
    bound = make_engine(url)
    init_db(bound)
    return sessionmaker(autocommit=False, autoflush=False, bind=bound)
