from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import mysql.connector
from mysql.connector import pooling

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = 5
    charset: str = "utf8mb4"


class DatabaseConnection:
    """Process-wide connection factory backed by a mysql-connector pool.

    ``connect()`` hands out a pooled connection; closing it returns it to the
    pool, so repositories keep the open/commit/close-per-operation pattern.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None or cls._instance._config != config:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def _connect_kwargs(self) -> dict:
        return dict(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            charset=self._config.charset,
        )

    def connect(self):
        if self._config.pool_size <= 0:
            return mysql.connector.connect(**self._connect_kwargs())

        if self._pool is None:
            self._pool = pooling.MySQLConnectionPool(
                pool_name=f"pension_{self._config.database}",
                pool_size=self._config.pool_size,
                **self._connect_kwargs(),
            )
            logger.info(
                "MySQL pool ready: %s@%s:%s/%s (size=%s)",
                self._config.user,
                self._config.host,
                self._config.port,
                self._config.database,
                self._config.pool_size,
            )
        return self._pool.get_connection()
