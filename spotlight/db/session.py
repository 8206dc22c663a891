from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from spotlight.core.config import settings

# The engine owns the connection pool for the configured database.
engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Yields one session per request and always closes it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
