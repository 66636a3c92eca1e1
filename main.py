import logging
import sys
from flask import Flask, jsonify
from flask_cors import CORS

from config import Settings, load_settings
from exceptions import ConfigurationError
from routes.student import student_bp
from routes.teacher import teacher_bp
from services import EXTENSION_KEY, build_services, get_services
from sockets import make_broadcaster, socketio

logger = logging.getLogger(__name__)


def create_app(settings: Settings = None) -> Flask:
    """Build the board app. Raises ConfigurationError when storage is not configured."""
    settings = settings or load_settings()

    # -------------------------------------------------
    # APP INITIALIZATION
    # -------------------------------------------------
    app = Flask(__name__)

    # -------------------------------------------------
    # CORS CONFIGURATION
    # -------------------------------------------------
    CORS(
        app,
        resources={
            r"/api/*": {
                "origins": settings.allowed_origins,
                "methods": ["GET", "POST", "OPTIONS"],
                "allow_headers": ["Content-Type", "Authorization", "X-Client-Id"],
                "supports_credentials": True,
            }
        },
    )

    # -------------------------------------------------
    # SOCKET.IO INITIALIZATION
    # -------------------------------------------------
    socketio.init_app(app, cors_allowed_origins="*")

    # -------------------------------------------------
    # STORAGE + LIVE BOARD
    # -------------------------------------------------
    services = build_services(settings)
    services.store.subscribe(make_broadcaster(settings.schema))
    mode = services.board.start()
    app.extensions[EXTENSION_KEY] = services
    logger.info("Board ready in %s mode with %s moods", mode, len(services.board.snapshot()))
    if not settings.auth_enabled:
        logger.warning("OPERATOR_PASSWORD not set: teacher controls are open to anyone")

    # -------------------------------------------------
    # BLUEPRINT REGISTRATION
    # -------------------------------------------------
    app.register_blueprint(teacher_bp, url_prefix="/api/teacher")
    app.register_blueprint(student_bp, url_prefix="/api/student")

    # -------------------------------------------------
    # ROOT + HEALTH
    # -------------------------------------------------
    @app.get("/")
    def home():
        return jsonify({
            "message": "Emoji Code Mood backend running with Flask + Socket.IO",
            "environment": settings.environment,
            "schema": settings.schema.variant,
            "allowed_origins": settings.allowed_origins,
        }), 200

    @app.get("/health")
    def health():
        return jsonify({
            "status": "healthy",
            "mode": get_services().board.mode,
            "allowed_origins": settings.allowed_origins,
        }), 200

    return app


# -------------------------------------------------
# MAIN ENTRY POINT
# -------------------------------------------------
def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.critical("Cannot start: %s", e)
        sys.exit(1)

    app = create_app(settings)

    logger.info("==========================================")
    logger.info("Emoji Code Mood Backend Starting...")
    logger.info("Environment: %s", settings.environment)
    logger.info("Field schema: %s", settings.schema.variant)
    logger.info("Operator auth: %s", "enabled" if settings.auth_enabled else "disabled")
    logger.info("Allowed Frontend Origins: %s", settings.allowed_origins)
    logger.info("Running on http://0.0.0.0:%s", settings.port)
    logger.info("==========================================")

    # Allow Werkzeug for Render
    socketio.run(app, host="0.0.0.0", port=settings.port, allow_unsafe_werkzeug=True)


if __name__ == "__main__":
    main()
