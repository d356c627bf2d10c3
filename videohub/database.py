import logging
import threading
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from videohub.config import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """
    Explicit datastore handle. The engine is built lazily on first use and
    reused; ensure_connected() is idempotent and safe to call from any request.
    """

    def __init__(self, url: str, **engine_kwargs):
        self.url = url
        self._engine_kwargs = engine_kwargs
        self._engine: Engine | None = None
        self._sessionmaker: sessionmaker | None = None
        self._lock = threading.Lock()

    @property
    def engine(self) -> Engine:
        return self.ensure_connected()

    def ensure_connected(self) -> Engine:
        if self._engine is not None:
            return self._engine
        with self._lock:
            if self._engine is None:
                kwargs = dict(self._engine_kwargs)
                # SQLite needs check_same_thread=False for FastAPI
                if self.url.startswith("sqlite"):
                    kwargs.setdefault("connect_args", {"check_same_thread": False})
                engine = create_engine(self.url, echo=False, **kwargs)
                self._sessionmaker = sessionmaker(autocommit=False, autoflush=False, bind=engine)
                self._engine = engine
                logger.info("Datastore engine created for %s", engine.url.render_as_string(hide_password=True))
        return self._engine

    def session(self) -> Session:
        self.ensure_connected()
        return self._sessionmaker()

    def ping(self) -> bool:
        """True when a trivial query succeeds."""
        try:
            with self.ensure_connected().connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning("Datastore ping failed: %s", e)
            return False

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.ensure_connected())

    def dispose(self) -> None:
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
            self._engine = None
            self._sessionmaker = None


database = Database(get_settings().database_url)


def get_database() -> Database:
    return database


def get_db():
    db = database.session()
    try:
        yield db
    finally:
        db.close()
