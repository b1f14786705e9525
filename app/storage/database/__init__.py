from .db_connector import engine, async_session, create_tables, dispose_engine

__all__ = ["engine", "async_session", "create_tables", "dispose_engine"]
