from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sillywalk.config import settings

def make_engine(db_url: str):
    connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}
    return create_engine(db_url, connect_args=connect_args)

engine = make_engine(settings.DB_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
Base = declarative_base()

def init_db(bind=None):
    from sillywalk.db import models  # ensure models are imported
    models.Base.metadata.create_all(bind=bind or engine)
