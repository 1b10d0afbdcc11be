from .unit_of_work import SqlAlchemyUnitOfWork
from .database import create_engine, create_session_factory, create_schema

__all__ = [
    "SqlAlchemyUnitOfWork",
    "create_engine",
    "create_session_factory",
    "create_schema",
]
