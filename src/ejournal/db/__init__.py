from .base import Base
from .session import build_engine, build_sessionmaker, get_session, get_sessionmaker

__all__ = ["Base", "build_engine", "build_sessionmaker", "get_session", "get_sessionmaker"]
