import logging
import os
from datetime import datetime, timezone

from flask import Flask, jsonify

import blob_store
from api import api_bp
from config import Config
from errors import register_error_handlers
from extensions import cors, db

log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level):
    logging.basicConfig(level=level, format=log_format)
    # Keep request/connection chatter out of the application log
    for noisy_name in ("werkzeug", "urllib3"):
        logging.getLogger(noisy_name).setLevel(logging.WARNING)


def _allowed_origins(origins_cfg):
    if origins_cfg.strip() == "*":
        return "*"
    return [o.strip() for o in origins_cfg.split(",") if o.strip()]


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    uri = app.config["SQLALCHEMY_DATABASE_URI"]
    if uri.startswith("sqlite:///"):
        os.makedirs(os.path.dirname(uri[len("sqlite:///"):]) or ".", exist_ok=True)

    db.init_app(app)
    cors.init_app(
        app, resources={r"/api/*": {"origins": _allowed_origins(app.config["CORS_ORIGINS"])}}
    )
    blob_store.init_app(app)

    # Import models so their tables register before create_all
    import models  # noqa: F401

    with app.app_context():
        db.create_all()

    app.register_blueprint(api_bp)
    register_error_handlers(app)

    @app.route("/health")
    def health_check():
        """Health check endpoint for k8s and monitoring"""
        redis_status = blob_store.check_redis_connection()
        return jsonify({
            "status": "healthy" if redis_status else "degraded",
            "redis": "connected" if redis_status else "disconnected",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }), 200 if redis_status else 503

    logger.info(f"Whiteboard app ready (database={app.config['SQLALCHEMY_DATABASE_URI']})")
    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=True)
