from .db_connector import build_engine, build_session_factory, dispose_engine

__all__ = ["build_engine", "build_session_factory", "dispose_engine"]
