"""Generate database session"""

from typing import Generator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import Settings
from src.db.schema import Base


def build_engine(settings: Optional[Settings] = None) -> Engine:
    settings = settings or Settings.from_env()
    return create_engine(settings.database_url, echo=settings.database_echo)


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    # Ensure all tables are created
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
