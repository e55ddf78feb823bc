from __future__ import annotations

import importlib
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .common.logger import get_logger, set_level
from .container import Container, build_container
from .core.constants import DEFAULT_PAGE_SIZE
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .dashboard.controller import register as register_dashboard
from .orders.controller import register as register_orders
from .products.controller import register as register_products
from .storefront.controller import register as register_storefront
from .users.controller import register as register_users

log = get_logger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.permanent_session_lifetime = timedelta(days=7)
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["PAGE_SIZE"] = int(getattr(settings, "PAGE_SIZE", DEFAULT_PAGE_SIZE))
    set_level(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        log.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            log.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            ensure_demo_users(db_config)
            log.info("demo seed ready")

        container = build_container(db_config=db_config, page_size=app.config["PAGE_SIZE"])

    register_users(app, container)
    register_products(app, container)
    register_orders(app, container)
    register_storefront(app, container)
    register_dashboard(app, container)

    @app.route("/health", endpoint="health")
    def health():
        return jsonify({"status": "ok"})

    return app
