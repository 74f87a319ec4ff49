import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, jsonify
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from storefront.core.config import config
from storefront.core.dependencies import DependencyContainer, build_container
from storefront.core.exceptions import BaseAPIException
from storefront.db import init_db
from storefront.routes.cart import cart_bp
from storefront.routes.checkout import checkout_bp
from storefront.routes.coupons import coupons_bp
from storefront.routes.membership import membership_bp

logger = logging.getLogger(__name__)


def create_app(container: Optional[DependencyContainer] = None) -> Flask:
    """
    Application factory.

    Pass a pre-built container to swap services (tests register fakes for
    the backend client this way); otherwise the defaults from the
    environment are wired.
    """
    logging.basicConfig(
        level=getattr(logging, config.app.log_level.upper(), logging.INFO),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    if container is None:
        config.validate()
        container = build_container()

    app = Flask(__name__)
    app.extensions["storefront"] = container

    init_db(container.get(Engine))

    # ------------------------------------------------------------------ #
    # Blueprints, each domain registered under /api/v1/                   #
    # ------------------------------------------------------------------ #
    app.register_blueprint(cart_bp,       url_prefix="/api/v1/cart")
    app.register_blueprint(coupons_bp,    url_prefix="/api/v1/coupons")
    app.register_blueprint(checkout_bp,   url_prefix="/api/v1/checkout")
    app.register_blueprint(membership_bp, url_prefix="/api/v1/membership")

    # ------------------------------------------------------------------ #
    # Error handlers, consistent JSON error envelope                      #
    # ------------------------------------------------------------------ #
    @app.errorhandler(BaseAPIException)
    def api_error(e):
        if e.status_code >= 500:
            logger.error(f"{e.error_code}: {e.internal_message}")
        else:
            logger.info(f"{e.error_code}: {e.message}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(400)
    def bad_request(e):
        return jsonify({"success": False, "error": str(e.description)}), 400

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"success": False, "error": str(e.description)}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"success": False, "error": str(e.description)}), 405

    @app.errorhandler(SQLAlchemyError)
    def db_error(e):
        logger.error(f"Database error: {e}")
        return jsonify({"success": False, "error": "A database error occurred."}), 500

    @app.errorhandler(500)
    def internal_error(e):
        return jsonify({"success": False, "error": "An internal server error occurred."}), 500

    # ------------------------------------------------------------------ #
    # Health check                                                         #
    # ------------------------------------------------------------------ #
    @app.get("/health")
    def health():
        """Liveness + readiness probe. Returns 503 if DB is unreachable."""
        try:
            with container.get(Engine).connect() as conn:
                conn.execute(text("SELECT 1"))
            return jsonify({
                "status": "ok",
                "database": "reachable",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }), 200
        except SQLAlchemyError as exc:
            logger.error(f"Health check failed: {exc}")
            return jsonify({"status": "error", "database": "unreachable"}), 503

    return app


if __name__ == "__main__":
    application = create_app()
    application.run(debug=config.app.debug, host=config.app.host, port=config.app.port)
