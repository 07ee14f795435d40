import logging
from flask import Flask, jsonify
from flask_cors import CORS
from .config import Config
from attendance_app.extensions import db, limiter, migrate
from attendance_app.errors import AttendanceAppError
from attendance_app.signals import views_invalidated

logger = logging.getLogger(__name__)


def _log_revalidation(sender, paths=(), **extra):
    logger.debug("Revalidating %s %s", ", ".join(paths), extra or "")


def register_error_handlers(app):

    @app.errorhandler(AttendanceAppError)
    def handle_app_error(error):
        return jsonify(error.to_result()), error.status_code

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"success": False, "error": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"success": False, "error": "Method not allowed"}), 405

    @app.errorhandler(500)
    def internal_error(error):
        return jsonify({"success": False, "error": "Internal server error"}), 500


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    CORS(app, origins=app.config["CORS_ORIGINS"], supports_credentials=True)
    limiter.init_app(app)
    migrate.init_app(app, db)

    from attendance_app.routes import register_routes
    from attendance_app.cli import register_commands
    register_routes(app)
    register_error_handlers(app)
    register_commands(app)

    views_invalidated.connect(_log_revalidation)

    with app.app_context():
        db.create_all()

    return app
