from .database import Base, engine, AsyncSessionLocal, get_db, utcnow, as_utc, JSONType

__all__ = ["Base", "engine", "AsyncSessionLocal", "get_db", "utcnow", "as_utc", "JSONType"]
