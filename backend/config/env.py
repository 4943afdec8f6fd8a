from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import parse_qsl, unquote, urlparse

POSTGRES_SCHEMES = {"postgres", "postgresql", "pgsql", "postgresql+psycopg"}


def load_dotenv(path: str | Path | None) -> None:
    if not path:
        return
    dotenv_path = Path(path)
    if not dotenv_path.exists():
        return

    for raw_line in dotenv_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if key.startswith("export "):
            key = key[len("export ") :].strip()
        value = value.strip()
        if value.startswith(("'", '"')) and value.endswith(("'", '"')) and len(value) >= 2:
            value = value[1:-1]
        os.environ.setdefault(key, value)


def env_bool(name: str, default: bool = False) -> bool:
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int) -> int:
    raw_value = os.getenv(name, "").strip()
    if not raw_value:
        return default
    try:
        return int(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw_value!r}.") from exc


def env_float(name: str, default: float) -> float:
    raw_value = os.getenv(name, "").strip()
    if not raw_value:
        return default
    try:
        return float(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw_value!r}.") from exc


def env_list(name: str, default: list[str] | None = None) -> list[str]:
    raw_value = os.getenv(name, "")
    if not raw_value:
        return list(default or [])
    return [part.strip() for part in raw_value.split(",") if part.strip()]


def require_env(name: str, hint: str = "") -> str:
    value = os.getenv(name, "").strip()
    if not value:
        message = f"{name} must be set."
        if hint:
            message = f"{message} {hint}"
        raise RuntimeError(message)
    return value


def pool_options_from_env() -> dict[str, int | float]:
    """Connection pool sizing and timeouts for psycopg's pool, in seconds."""
    return {
        "min_size": env_int("DATABASE_POOL_MIN_SIZE", 1),
        "max_size": env_int("DATABASE_POOL_MAX_SIZE", 10),
        "timeout": env_float("DATABASE_POOL_TIMEOUT", 2.0),
        "max_idle": env_float("DATABASE_POOL_MAX_IDLE", 30.0),
    }


def parse_database_url(
    database_url: str | None,
    *,
    default_sqlite_path: Path,
    pool: dict[str, int | float] | None = None,
) -> dict[str, object]:
    if not database_url:
        return {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": str(default_sqlite_path),
        }

    parsed = urlparse(database_url)
    scheme = parsed.scheme.lower()

    if scheme in POSTGRES_SCHEMES:
        if not parsed.path or parsed.path == "/":
            raise ValueError("DATABASE_URL is missing a database name.")
        db_name = unquote(parsed.path.lstrip("/"))
        config: dict[str, object] = {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": db_name,
            "USER": unquote(parsed.username or ""),
            "PASSWORD": unquote(parsed.password or ""),
            "HOST": parsed.hostname or "",
            "PORT": str(parsed.port or ""),
        }
        options: dict[str, object] = dict(parse_qsl(parsed.query, keep_blank_values=False))
        if pool:
            options["pool"] = dict(pool)
        if options:
            config["OPTIONS"] = options
        return config

    if scheme == "sqlite":
        db_path = unquote(parsed.path or "")
        if parsed.netloc and parsed.netloc not in {"", "localhost"}:
            db_path = f"/{parsed.netloc}{db_path}"
        if db_path in {"", "/"}:
            db_path = str(default_sqlite_path)
        return {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": db_path,
        }

    raise ValueError(f"Unsupported database scheme '{scheme}' in DATABASE_URL.")
