from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings

engine_kwargs = {"pool_pre_ping": True}
if settings.SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
    # Request handlers run in a threadpool
    engine_kwargs["connect_args"] = {"check_same_thread": False}
    if ":memory:" in settings.SQLALCHEMY_DATABASE_URI:
        # One shared connection, otherwise every checkout sees an empty database
        engine_kwargs["poolclass"] = StaticPool

engine = create_engine(settings.SQLALCHEMY_DATABASE_URI, **engine_kwargs)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
