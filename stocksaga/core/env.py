"""
.env loading and ``${VAR}`` expansion for stocksaga configuration.

Hosts keep store URLs and timeouts in a ``.env`` next to the project, and
YAML config files refer to them as ``${STOCKSAGA_STORE_URL:-memory://}``.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

_TRUTHY = frozenset({"true", "1", "yes", "on"})
_FALSY = frozenset({"false", "0", "no", "off"})

# ${NAME}, ${NAME:-fallback}, ${NAME:?message}
_REFERENCE = re.compile(r"\$\{(?P<name>[^}:]+)(?::(?P<op>[-?])(?P<arg>[^}]*))?\}")


def _expand(match: re.Match[str]) -> str:
    name, op, arg = match.group("name", "op", "arg")
    current = os.environ.get(name)
    if current is not None:
        return current
    if op == "-":
        return arg
    if op == "?":
        raise ValueError(arg or f"Required variable not set: {name}")
    # unknown references stay in place so a later pass can resolve them
    return match.group(0)


class EnvManager:
    """
    Reads stocksaga settings from the process environment.

    Example:
        >>> env = EnvManager()
        >>> env.get("STOCKSAGA_STORE_URL", "memory://")
        'memory://'
    """

    def __init__(self, project_root: Path | str | None = None, auto_load: bool = True):
        self.project_root = Path(project_root) if project_root else Path.cwd()
        self.loaded_from: Path | None = None
        if auto_load:
            self.load()

    def load(self, env_file: str | Path | None = None, override: bool = False) -> bool:
        """
        Load ``env_file`` (``<project_root>/.env`` by default) into ``os.environ``.

        Returns False when the file does not exist.
        """
        path = Path(env_file) if env_file is not None else self.project_root / ".env"
        if not path.is_file():
            return False
        load_dotenv(path, override=override)
        self.loaded_from = path
        return True

    def get(self, key: str, default: str | None = None, required: bool = False) -> str | None:
        """Return ``key`` from the environment; ``required`` raises ValueError when unset."""
        if key in os.environ:
            return os.environ[key]
        if required and default is None:
            msg = f"Required environment variable not set: {key}"
            raise ValueError(msg)
        return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        raw = (self.get(key) or "").strip().lower()
        if raw in _TRUTHY:
            return True
        if raw in _FALSY:
            return False
        return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return float(raw)
        except ValueError:
            return default

    def substitute(self, text: str) -> str:
        """Expand ``${VAR}``, ``${VAR:-default}`` and ``${VAR:?error}`` in ``text``."""
        return _REFERENCE.sub(_expand, text)

    def substitute_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        """Expand references in every string nested inside ``data``."""
        return {key: self._substitute_value(value) for key, value in data.items()}

    def _substitute_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return self.substitute(value)
        if isinstance(value, dict):
            return self.substitute_dict(value)
        if isinstance(value, list):
            return [self._substitute_value(item) for item in value]
        return value


_env: EnvManager | None = None


def get_env() -> EnvManager:
    """Process-wide EnvManager, created on first use."""
    global _env
    if _env is None:
        _env = EnvManager()
    return _env
