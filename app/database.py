# app/database.py
from fastapi import Request
from sqlalchemy import Engine
from sqlmodel import SQLModel, create_engine, Session


def _with_ssl(db_url: str) -> str:
    """
    Append sslmode=require to Postgres URLs that do not set it.
    Other backends (e.g. SQLite in tests) are left unchanged.
    """
    if not db_url.startswith("postgres") or "sslmode=" in db_url:
        return db_url
    if "?" in db_url:
        return db_url + "&sslmode=require"
    return db_url + "?sslmode=require"


def build_engine(db_url: str) -> Engine:
    """
    Create the SQLAlchemy engine.

    - pool_pre_ping=True: validate connections before using them
    """
    return create_engine(
        _with_ssl(db_url),
        echo=False,        # set to True if you want to debug SQL queries
        pool_pre_ping=True,
    )


def create_db_and_tables(engine: Engine) -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(engine)


def get_session(request: Request):
    """
    FastAPI dependency that yields a SQLModel Session.

    The engine is created in the app lifespan and kept on `app.state`.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(request.app.state.engine) as session:
        yield session
