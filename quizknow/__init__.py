from flask import Flask, jsonify, request
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from dotenv import load_dotenv
from flask_migrate import Migrate
from flask_compress import Compress

# Load environment variables early so config is available for blueprint creation
load_dotenv()

from quizknow.config import config

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
compress = Compress()


def create_app(test_config: dict | None = None) -> Flask:
    """
    Application factory for the Flask app.
    Loads configuration, sets up the database and extensions,
    and registers blueprints and error handlers.

    Args:
        test_config: Optional mapping applied on top of the loaded configuration
    """
    # Re-initialize config to ensure latest .env values are loaded
    from quizknow.config import Config
    global config
    config = Config()

    # Validate configuration
    config.validate()

    app = Flask(__name__)

    app.config["SECRET_KEY"] = config.SECRET_KEY
    db_uri = config.SQLALCHEMY_DATABASE_URI
    app.config["SQLALCHEMY_DATABASE_URI"] = db_uri
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = config.SQLALCHEMY_TRACK_MODIFICATIONS
    app.config["SQLALCHEMY_ECHO"] = config.SQLALCHEMY_ECHO
    # Connection pooling only makes sense for the MySQL deployment
    if db_uri.startswith("mysql"):
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = {
            "pool_size": 10,
            "pool_recycle": 3600,
            "pool_pre_ping": True,
            "max_overflow": 20,
            "connect_args": {
                "connect_timeout": 5,
                "charset": "utf8mb4",
            }
        }

    app.config["COMPRESS_MIMETYPES"] = ['application/json']
    app.config["COMPRESS_LEVEL"] = 6
    app.config["COMPRESS_MIN_SIZE"] = 500
    app.config["SESSION_COOKIE_SECURE"] = config.SESSION_COOKIE_SECURE
    app.config["SESSION_COOKIE_HTTPONLY"] = config.SESSION_COOKIE_HTTPONLY
    app.config["SESSION_COOKIE_SAMESITE"] = config.SESSION_COOKIE_SAMESITE or None

    # Domain limits; services read them from current_app.config
    app.config["MIN_PASSWORD_LENGTH"] = config.MIN_PASSWORD_LENGTH
    app.config["MAX_QUESTIONS_PER_QUIZ"] = config.MAX_QUESTIONS_PER_QUIZ
    app.config["DEFAULT_ATTEMPTS_ALLOWED"] = config.DEFAULT_ATTEMPTS_ALLOWED
    app.config["DEFAULT_PASSING_SCORE"] = config.DEFAULT_PASSING_SCORE

    if test_config:
        app.config.update(test_config)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    compress.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        from quizknow.auth.models import User
        try:
            return db.session.get(User, int(user_id))
        except (ValueError, TypeError):
            return None

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'success': False, 'error': 'Authentication required', 'code': 'unauthenticated'}), 401

    @app.route("/api/health")
    def health():
        return jsonify({'status': 'OK'}), 200

    # Register blueprints
    from quizknow.auth import auth_bp
    app.register_blueprint(auth_bp)

    from quizknow.access import access_bp
    app.register_blueprint(access_bp)

    from quizknow.quiz import quiz_bp
    app.register_blueprint(quiz_bp)

    from quizknow.common.errors import register_error_handlers
    register_error_handlers(app)

    @app.errorhandler(404)
    def handle_404(e):
        """Return JSON for unknown routes."""
        app.logger.warning(f"404 error: {request.method} {request.path}")
        return jsonify({
            'success': False,
            'error': f'Route not found: {request.method} {request.path}',
            'code': 'not_found',
        }), 404

    @app.errorhandler(405)
    def handle_405(e):
        """Return JSON for method mismatches."""
        app.logger.warning(f"405 error: {request.method} {request.path}")
        return jsonify({
            'success': False,
            'error': f'Method not allowed: {request.method} {request.path}',
            'code': 'method_not_allowed',
        }), 405

    # Create tables if they do not exist
    with app.app_context():
        from quizknow.auth import models as _auth_models  # noqa: F401
        from quizknow.access import models as _access_models  # noqa: F401
        from quizknow.quiz import models as _quiz_models  # noqa: F401
        db.create_all()

    app.logger.info("QuizKnow application initialized")
    return app
