from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from mortgage_calculator.config import DATABASE_URL
from mortgage_calculator.models import Base
from mortgage_calculator.models.storage import StorageEntry

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db():
    """
    Create tables if they don't exist.
    For schema changes, use Alembic migrations instead:
        alembic revision --autogenerate -m "Description of change"
        alembic upgrade head
    """
    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
