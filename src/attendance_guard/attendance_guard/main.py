from __future__ import annotations

import importlib
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from dotenv import load_dotenv
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from config import get_settings_module

from .allowlist.controller import register as register_allowlist
from .attendance.controller import register as register_attendance
from .common.datetime_utils import now_utc
from .common.web import register_error_handlers
from .container import BACKEND_MEMORY, Container, build_container
from .core.constants import DEFAULT_ALLOWLIST_REFRESH_SECONDS, DEFAULT_DEVICE_ID_HEADER
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_identities, list_tables, seed_memory_store
from .device_requests.controller import register as register_device_requests
from .devices.controller import register as register_devices

EXTENSION_KEY = "attendance_guard"

_REPO_ROOT = Path(__file__).resolve().parents[3]


def _load_settings(settings_module: str, overrides: Optional[dict]) -> dict:
    settings = importlib.import_module(settings_module)
    values = {name: getattr(settings, name) for name in dir(settings) if name.isupper()}
    values.update(overrides or {})
    return values


def create_app(settings_override: Optional[dict] = None, *, clock: Callable[[], datetime] = now_utc) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = _load_settings(settings_module, settings_override)

    logging.basicConfig(
        level=str(settings.get("LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app.secret_key = settings["SECRET_KEY"]
    app.config["DEBUG"] = bool(settings.get("DEBUG", False))
    app.config["TESTING"] = bool(settings.get("TESTING", False))
    app.config["DEVICE_ID_HEADER"] = settings.get("DEVICE_ID_HEADER", DEFAULT_DEVICE_ID_HEADER)

    proxy_hops = int(settings.get("TRUSTED_PROXY_HOPS", 0))
    if proxy_hops > 0:
        # Only the last `proxy_hops` X-Forwarded-For entries are believed.
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=proxy_hops)

    backend = str(settings.get("STORE_BACKEND", "mysql")).lower()
    db_config = dict(settings.get("DB_CONFIG") or {})

    if backend == BACKEND_MEMORY:
        app.logger.info("[attendance-guard] settings=%s store=memory", settings_module)
    else:
        app.logger.info(
            "[attendance-guard] settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

    container = build_container(
        db_config=db_config,
        backend=backend,
        allowlist_refresh_seconds=float(settings.get("ALLOWLIST_REFRESH_SECONDS", DEFAULT_ALLOWLIST_REFRESH_SECONDS)),
        clock=clock,
    )
    _prepare_store(app, container, db_config, settings)

    register_attendance(app, container)
    register_devices(app, container)
    register_device_requests(app, container)
    register_allowlist(app, container)
    register_error_handlers(app)

    app.extensions[EXTENSION_KEY] = container
    return app


def _prepare_store(app: Flask, container: Container, db_config: dict, settings: dict) -> None:
    auto_init_db = bool(settings.get("AUTO_INIT_DB", False))
    auto_seed_db = bool(settings.get("AUTO_SEED_DB", False))

    if container.memory_db is not None:
        if auto_seed_db:
            seed_memory_store(container.memory_db)
            app.logger.info("[attendance-guard] demo seed ready (memory)")
        return

    if auto_init_db:
        apply_schema(db_config, schema_path=_REPO_ROOT / "database" / "schema.sql")
        app.logger.info("[attendance-guard] schema ready (tables=%d)", len(list_tables(db_config)))
    if auto_seed_db:
        apply_seed_sql(db_config, seed_path=_REPO_ROOT / "database" / "seed.sql")
        ensure_demo_identities(db_config)
        app.logger.info("[attendance-guard] demo seed ready")
