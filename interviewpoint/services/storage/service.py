from __future__ import annotations

import json
import logging
import os
import time
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from sqlalchemy import Column, Float, String, Text, create_engine, delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

Base = declarative_base()

TEMPLATES_KEY = "ivp_templates"
RESULTS_KEY = "ivp_results"
SETTINGS_KEY = "ivp_settings"
RUNS_KEY = "ivp_runs"

KNOWN_KEYS = (TEMPLATES_KEY, RESULTS_KEY, SETTINGS_KEY, RUNS_KEY)


class KeyValueRow(Base):
    __tablename__ = "kv_store"

    key = Column(String(64), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(Float, nullable=False, default=lambda: time.time(), onupdate=lambda: time.time())


def _load_database_url(database_url: Optional[str] = None) -> str:
    url = database_url or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not configured for storage service")
    return url


class StorageService:
    """JSON documents under a handful of string keys, one row per key."""

    def __init__(self, database_url: Optional[str] = None, *, create_tables: bool = True) -> None:
        url = _load_database_url(database_url)
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        self._engine: Engine = create_engine(url, connect_args=connect_args)
        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False, future=True)
        if create_tables:
            Base.metadata.create_all(self._engine)

    @contextmanager
    def session(self) -> Iterator[Session]:  # type: ignore[override]
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get(self, key: str, default: Any = None) -> Any:
        with self.session() as sess:
            row = sess.get(KeyValueRow, key)
            if row is None:
                return default
            return json.loads(row.value)

    def has(self, key: str) -> bool:
        with self.session() as sess:
            return sess.get(KeyValueRow, key) is not None

    def put(self, key: str, value: Any) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        with self.session() as sess:
            row = sess.get(KeyValueRow, key)
            if row is None:
                sess.add(KeyValueRow(key=key, value=payload, updated_at=time.time()))
            else:
                row.value = payload
                row.updated_at = time.time()
        logger.debug("stored %s (%d bytes)", key, len(payload))

    def delete(self, key: str) -> None:
        with self.session() as sess:
            sess.execute(delete(KeyValueRow).where(KeyValueRow.key == key))

    def keys(self) -> List[str]:
        with self.session() as sess:
            rows = sess.execute(select(KeyValueRow.key).order_by(KeyValueRow.key)).scalars().all()
        return list(rows)

    def clear(self) -> None:
        with self.session() as sess:
            sess.execute(delete(KeyValueRow))
        logger.info("storage cleared")


__all__ = [
    "StorageService",
    "TEMPLATES_KEY",
    "RESULTS_KEY",
    "SETTINGS_KEY",
    "RUNS_KEY",
    "KNOWN_KEYS",
]
