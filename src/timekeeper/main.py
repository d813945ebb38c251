from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .clock.controller import register as register_clock
from .common.web import register_error_handlers
from .config import get_settings_module
from .container import Container, build_container
from .leaves.controller import register as register_leaves
from .notifications.dispatcher import build_notifier
from .overtime.controller import register as register_overtime
from .status.controller import register as register_status
from .worklogs.controller import register as register_worklogs

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        notifier = build_notifier(
            api_key=getattr(settings, "NOVU_API_KEY", ""),
            base_url=getattr(settings, "NOVU_BASE_URL", "https://api.novu.co"),
            timeout=float(getattr(settings, "NOTIFY_TIMEOUT", 10)),
        )
        container = build_container(
            db_config=db_config,
            notifier=notifier,
            utc_offset=getattr(settings, "UTC_OFFSET", "+08:00"),
        )

    register_error_handlers(app)
    register_clock(app, container)
    register_status(app, container)
    register_worklogs(app, container)
    register_overtime(app, container)
    register_leaves(app, container)

    return app
