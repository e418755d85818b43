from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

import mysql.connector

DEFAULT_DATABASE = "school_attendance"


@dataclass(frozen=True)
class DBConfig:
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = ""
    database: str = DEFAULT_DATABASE

    @classmethod
    def from_dict(cls, db_config: Mapping[str, Any]) -> "DBConfig":
        """Build from a settings DB_CONFIG mapping; missing keys keep the defaults."""

        known = {k: db_config[k] for k in cls.__dataclass_fields__ if db_config.get(k) is not None}
        if "port" in known:
            known["port"] = int(known["port"])
        return cls(**known)

    def server_params(self) -> dict[str, Any]:
        return {"host": self.host, "port": self.port, "user": self.user, "password": self.password}


class DatabaseConnection:
    """Process-wide factory for short-lived MySQL connections (one per operation)."""

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = cls(config)
        return cls._instance

    @property
    def database(self) -> str:
        return self._config.database

    def connect(self, *, with_database: bool = True):
        params = self._config.server_params()
        if with_database:
            params["database"] = self._config.database
        return mysql.connector.connect(**params)
