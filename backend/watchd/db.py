from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from watchd.core.config import get_settings

DATABASE_URL = get_settings().DATABASE_URL

# SQLite connections are shared with the threadpool that runs sync endpoints
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

def get_db():
    """Dependency to get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
