"""
Configuration module for the application.
All configuration values are read from environment variables.
"""
import os
import secrets
import warnings


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        # Flask Configuration
        self.SECRET_KEY: str = os.getenv("SECRET_KEY", "")
        self.FLASK_ENV: str = os.getenv("FLASK_ENV", "")
        self.FLASK_DEBUG: bool = os.getenv("FLASK_DEBUG", "").lower() == "true"

        # Generate a development SECRET_KEY if not set and in development mode
        if not self.SECRET_KEY and self.FLASK_ENV != "production":
            self.SECRET_KEY = secrets.token_urlsafe(32)
            warnings.warn(
                "SECRET_KEY not set. Generated a temporary key for development. "
                "Set SECRET_KEY in your .env file for production!",
                UserWarning
            )

        # Database Configuration
        self.DATABASE_URL: str = os.getenv("DATABASE_URL", "")
        self.DB_USER: str = os.getenv("DB_USER", "")
        self.DB_PASSWORD: str = os.getenv("DB_PASSWORD", "")
        self.DB_HOST: str = os.getenv("DB_HOST", "")
        self.DB_PORT: str = os.getenv("DB_PORT", "")
        self.DB_NAME: str = os.getenv("DB_NAME", "")

        # Blueprint URL Prefixes
        self.AUTH_API_PREFIX: str = os.getenv("AUTH_API_PREFIX", "/api/auth")
        self.ACCESS_API_PREFIX: str = os.getenv("ACCESS_API_PREFIX", "/api/requests")
        self.QUIZ_API_PREFIX: str = os.getenv("QUIZ_API_PREFIX", "/api/quizzes")

        # User Type Validation
        valid_user_types = os.getenv("VALID_USER_TYPES", "")
        self.VALID_USER_TYPES: list[str] = (
            [t.strip() for t in valid_user_types.split(",")] if valid_user_types
            else ["student", "instructor", "admin"]
        )

        # Password Validation
        min_pass_len = os.getenv("MIN_PASSWORD_LENGTH", "")
        self.MIN_PASSWORD_LENGTH: int = int(min_pass_len) if min_pass_len else 6

        # Quiz defaults
        attempts = os.getenv("DEFAULT_ATTEMPTS_ALLOWED", "")
        self.DEFAULT_ATTEMPTS_ALLOWED: int = int(attempts) if attempts else 1
        passing = os.getenv("DEFAULT_PASSING_SCORE", "")
        self.DEFAULT_PASSING_SCORE: int = int(passing) if passing else 70
        max_questions = os.getenv("MAX_QUESTIONS_PER_QUIZ", "")
        self.MAX_QUESTIONS_PER_QUIZ: int = int(max_questions) if max_questions else 200

        # Session Configuration
        session_secure = os.getenv("SESSION_COOKIE_SECURE", "")
        self.SESSION_COOKIE_SECURE: bool = session_secure.lower() == "true" if session_secure else False
        session_httponly = os.getenv("SESSION_COOKIE_HTTPONLY", "")
        self.SESSION_COOKIE_HTTPONLY: bool = session_httponly.lower() == "true" if session_httponly else True
        self.SESSION_COOKIE_SAMESITE: str = os.getenv("SESSION_COOKIE_SAMESITE", "Lax")

        # SQLAlchemy Configuration
        self.SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
        sqlalchemy_echo = os.getenv("SQLALCHEMY_ECHO", "")
        self.SQLALCHEMY_ECHO: bool = sqlalchemy_echo.lower() == "true" if sqlalchemy_echo else False

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Use DATABASE_URL when given, otherwise build the MySQL URI."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"mysql+pymysql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
            "?charset=utf8mb4"
        )

    def validate(self) -> None:
        """
        Validate required configuration values.
        Only enforces SECRET_KEY in production environment.
        """
        if not self.SECRET_KEY and self.FLASK_ENV == "production":
            raise ValueError(
                "SECRET_KEY environment variable is required in production. "
                "Set it in your .env file or environment variables."
            )
        if self.DEFAULT_ATTEMPTS_ALLOWED < 1:
            raise ValueError("DEFAULT_ATTEMPTS_ALLOWED must be at least 1")
        if not 0 <= self.DEFAULT_PASSING_SCORE <= 100:
            raise ValueError("DEFAULT_PASSING_SCORE must be between 0 and 100")


# Global config instance - will be re-initialized after load_dotenv()
config = Config()
