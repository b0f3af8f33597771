from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from kinship.config import settings

# SQLite needs this flag when sessions cross FastAPI's threadpool
connect_args = (
    {"check_same_thread": False}
    if settings.DATABASE_URL.startswith("sqlite")
    else {}
)

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()
