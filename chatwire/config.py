"""Key/value configuration read from ``~/.skype.conf`` over built-in defaults."""

from __future__ import annotations

import re
from pathlib import Path
from typing import ClassVar, Optional, Union

from chatwire.logger import get_logger

CONFIG_FILE = ".skype.conf"
CONFIG_DELIM = "="

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _to_int(text: str) -> int:
    match = _LEADING_INT.match(text)
    if match is None:
        raise ValueError(f"not an integer: {text!r}")
    return int(match.group(1))


class Config:
    """Configuration values; only keys present in DEFAULTS are accepted."""

    DEFAULTS: ClassVar[dict[str, str]] = {
        "ENV": "DEV",
        "TCP_PORT": "5000",
        "UDP_PORT": "7000",
        "SERVER_ADDRESS": "127.0.0.1",
        "LOCAL_IP": "127.0.0.1",
        "REMOTE_IP": "206.189.0.154",
        "HEADER_LENGTH": "10",
        "DB_USER": "postgres",
        "DB_PASSWORD": "password",
        "DB_ADDRESS": "localhost",
        "DB_NAME": "skype",
        "DB_PORT": "5432",
        "LOGGER_LEVEL": "trace",
        "DEBUG_ENABLE": "0",
    }

    _instance: ClassVar[Optional["Config"]] = None

    def __init__(self, path: Union[str, Path, None] = None) -> None:
        self.path = Path(path) if path is not None else Path.home() / CONFIG_FILE
        self._values = dict(self.DEFAULTS)
        if self.path.exists():
            self.load_contents(self._read_file())
        else:
            get_logger().error(
                "Could not find the %s file at '%s'.  Loading defaults",
                CONFIG_FILE,
                str(self.path),
            )

    @classmethod
    def get_instance(cls) -> "Config":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def free_instance(cls) -> None:
        cls._instance = None

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def get(self, key: str, kind: type = str) -> Union[str, int]:
        """Return a value as ``str`` or ``int``; unknown keys give "" or 0."""
        if kind not in (str, int):
            raise TypeError("Invalid configuration type. Only str and int allowed")
        if key not in self:
            get_logger().error("Config key %s does not exists.", key)
            return kind()
        return self.get_str(key) if kind is str else self.get_int(key)

    def get_str(self, key: str) -> str:
        return self._values[key]

    def get_int(self, key: str) -> int:
        """Return a value as an integer, or -1 when it is missing or not numeric."""
        try:
            return _to_int(self._values[key])
        except (KeyError, ValueError):
            get_logger().error(
                "Attempted to get config key %s as integer but value is not valid", key
            )
            return -1

    def get_db(self) -> str:
        v = self._values
        return (
            f"postgresql://{v['DB_USER']}:{v['DB_PASSWORD']}@"
            f"{v['DB_ADDRESS']}:{v['DB_PORT']}/{v['DB_NAME']}"
        )

    def load_contents(self, contents: str) -> None:
        """Apply ``KEY=value`` lines; blank lines and ``#`` comments are skipped."""
        for raw in contents.split("\n"):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            key, _, value = line.partition(CONFIG_DELIM)
            key = key.strip()
            if key in self:
                self._values[key] = value.strip()
            else:
                get_logger().error(
                    "Could not load config at key '%s' because it is invalid.", key
                )
        self._set_server_address()

    def _set_server_address(self) -> None:
        source = "REMOTE_IP" if self._values["ENV"] == "PROD" else "LOCAL_IP"
        self._values["SERVER_ADDRESS"] = self._values[source]

    def _read_file(self) -> str:
        if not self.path.is_file():
            get_logger().error("%s is an invalid config file. Could not load.", str(self.path))
            return ""
        try:
            return self.path.read_bytes().decode("utf-8", errors="replace")
        except OSError:
            get_logger().error("Fail opening file stream.")
            return ""