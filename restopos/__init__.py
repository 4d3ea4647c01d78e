import logging

from flask import Flask, jsonify

from .config import Config
from .extensions import db, cors, migrate


def _configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("restopos").setLevel(level)
    app.logger.setLevel(level)


def create_app(config_overrides=None):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)
    Config.init_app(app)
    _configure_logging(app)

    # Init extensions
    db.init_app(app)
    cors.init_app(app, resources={r"/*": {"origins": "*"}})
    migrate.init_app(app, db)

    from .services.terminal_service import TerminalCarts
    app.extensions["restopos.terminals"] = TerminalCarts()

    from .utils.api import register_error_handlers
    register_error_handlers(app)

    # Register blueprints
    from .catalog import bp as catalog_bp; app.register_blueprint(catalog_bp)
    from .cart import bp as cart_bp; app.register_blueprint(cart_bp)
    from .promo import bp as promo_bp; app.register_blueprint(promo_bp)
    from .sales import bp as sales_bp; app.register_blueprint(sales_bp)

    from .cli import register_cli
    register_cli(app)

    @app.get("/")
    def health():
        return jsonify(ok=True, msg="POS API running")

    with app.app_context():
        from . import model  # noqa: F401  (register tables)
        db.create_all()
        app.logger.debug("url map: %s", sorted(r.rule for r in app.url_map.iter_rules()))

    return app
