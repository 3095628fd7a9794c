"""Database configuration and initialization."""
from contextlib import contextmanager

from flask import current_app
from sqlalchemy import create_engine, event
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

# Create SQLAlchemy base
Base = declarative_base()


class Store:
    """
    Handle on the relational store: one engine plus a scoped session factory.

    Built once by the app factory and kept in ``app.extensions['store']``.
    Services never reach for it directly; they receive a session.
    """

    def __init__(self, database_uri: str, echo: bool = False):
        self.database_uri = database_uri
        self.engine = self._build_engine(database_uri, echo)
        self.session = scoped_session(
            sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        )

    @staticmethod
    def _build_engine(database_uri: str, echo: bool):
        if database_uri.startswith('sqlite'):
            kwargs = {'connect_args': {'check_same_thread': False}}
            if database_uri in ('sqlite://', 'sqlite:///:memory:'):
                # A single shared connection keeps the in-memory database alive
                kwargs['poolclass'] = StaticPool
            engine = create_engine(database_uri, echo=echo, **kwargs)

            @event.listens_for(engine, 'connect')
            def _enable_foreign_keys(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute('PRAGMA foreign_keys=ON')
                cursor.close()

            return engine

        return create_engine(
            database_uri,
            echo=echo,
            pool_pre_ping=True,  # Enable connection health checks
            pool_size=10,
            max_overflow=20
        )

    def create_all(self):
        """Create every table known to the models package."""
        import cafepos.models  # noqa: F401  (registers mappers on Base)
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self):
        Base.metadata.drop_all(bind=self.engine)

    def remove(self):
        self.session.remove()

    def dispose(self):
        self.session.remove()
        self.engine.dispose()


def init_db(app) -> Store:
    """Initialize database connection and register it on the app."""
    store = Store(
        app.config['SQLALCHEMY_DATABASE_URI'],
        echo=app.config.get('SQLALCHEMY_ECHO', False)
    )
    app.extensions['store'] = store

    # Register teardown
    @app.teardown_appcontext
    def shutdown_session(exception=None):
        """Close database session and rollback on error."""
        if exception:
            store.session.rollback()
        store.remove()

    return store


def get_store(app=None) -> Store:
    """Return the store registered on ``app`` (or the current app)."""
    app = app or current_app
    return app.extensions['store']


def get_session():
    """Get database session for the current app."""
    return get_store().session


@contextmanager
def transaction(session):
    """
    Run a block as one unit of work.

    Commits on success; rolls back and re-raises on any error.
    """
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
