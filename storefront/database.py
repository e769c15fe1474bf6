# storefront/database.py
from fastapi import Request
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from storefront.core.config import Settings

# ---------------------------------------------------------
# Engine construction
#
# The engine is built once per application by `create_app()` and kept on
# `app.state.engine`. Request handlers never import a global engine; they
# receive a Session through the `get_session` dependency.
#
# - SQLite: check_same_thread=False because FastAPI runs sync handlers
#   on a threadpool. In-memory URLs share one connection (StaticPool),
#   otherwise every new connection would see an empty database.
# - Other backends: pool_pre_ping=True to validate pooled connections.
# ---------------------------------------------------------


def make_engine(settings: Settings) -> Engine:
    db_url = settings.DATABASE_URL

    if db_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(db_url, echo=settings.DB_ECHO, **kwargs)

    return create_engine(
        db_url,
        echo=settings.DB_ECHO,  # set to True if you want to debug SQL queries
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
    FastAPI dependency that yields a SQLModel Session bound to the
    application's engine.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(request.app.state.engine) as session:
        yield session


def get_app_settings(request: Request) -> Settings:
    """FastAPI dependency returning the Settings the app was built with."""
    return request.app.state.settings
