from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from clinicdash.config import settings

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


class Base(DeclarativeBase):
    pass


def init_db(bind: Engine | None = None) -> None:
    """Create the patient tables on ``bind`` (the configured engine by default)."""
    from clinicdash.models import patient  # noqa: F401  registers StoredPatient

    Base.metadata.create_all(bind=bind or engine)
