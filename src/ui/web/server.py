"""
Web server — Flask app factory.

Serves the bilingual public directory (``/``), the admin panel
(``/admin``) and a JSON API (``/api``). One SessionContext is opened per
app and shared by every request; it is the server-side equivalent of the
admin page being open in a browser tab.
"""

from __future__ import annotations

import logging
import secrets
from pathlib import Path

from flask import Flask

from src.core.context import SessionContext

logger = logging.getLogger(__name__)

# Package directory for templates and static files
_PACKAGE_DIR = Path(__file__).parent

SESSION_KEY = "toolsdir.session"


def create_app(
    root: Path | None = None,
    config_path: Path | None = None,
    load: bool = True,
) -> Flask:
    """Create and configure the Flask application.

    Args:
        root: Workspace root (used when there is no directory.yml).
        config_path: Path to directory.yml.
        load: Fetch the catalog at startup (remote, else local copy).

    Returns:
        Configured Flask application.
    """
    app = Flask(
        __name__,
        template_folder=str(_PACKAGE_DIR / "templates"),
        static_folder=str(_PACKAGE_DIR / "static"),
    )

    ctx = SessionContext.open(config_path=config_path, root=root)

    app.config["WORKSPACE_ROOT"] = str(ctx.root)
    app.config["CONFIG_PATH"] = str(config_path) if config_path else None
    app.config["SECRET_KEY"] = secrets.token_hex(16)
    app.config["MAX_CONTENT_LENGTH"] = 5 * 1024 * 1024  # imports are small JSON files
    app.extensions[SESSION_KEY] = ctx

    # Register blueprints
    from src.ui.web.routes_admin import admin_bp
    from src.ui.web.routes_api import api_bp
    from src.ui.web.routes_pages import pages_bp
    from src.ui.web.routes_remote import remote_bp

    app.register_blueprint(pages_bp)
    app.register_blueprint(admin_bp, url_prefix="/admin")
    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(remote_bp, url_prefix="/api")

    if load:
        from src.core.use_cases.sync import load_catalog

        result = load_catalog(ctx)
        logger.info("Startup load: %s (%s)", result.message, result.source)

    logger.info("Web app created (root=%s)", ctx.root)
    return app


def run_server(
    app: Flask,
    host: str = "127.0.0.1",
    port: int = 8000,
    debug: bool = False,
) -> None:
    """Run the Flask development server."""
    logger.info("Starting web server on %s:%d", host, port)
    try:
        app.run(host=host, port=port, debug=debug, use_reloader=False)
    finally:
        app.extensions[SESSION_KEY].close()
