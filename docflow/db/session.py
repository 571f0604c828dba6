from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from docflow.core.config import get_settings

settings = get_settings()


def _connect_args(database_url: str) -> dict:
    # SQLite connections are shared with the request thread pool
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.database_url),
)
SessionLocal = sessionmaker(autoflush=False, bind=engine)
