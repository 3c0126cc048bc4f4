from .connection import Base, create_db_engine

__all__ = ["Base", "create_db_engine"]
