"""
Configuration for the book library application.

Values come from environment variables with development defaults.
"""
import os

BASE_DIR = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))


def _env_flag(name, default="0"):
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    # SECURITY: set a secure random key in production via env var
    SECRET_KEY = os.environ.get('BOOKLIB_SECRET') or 'change-this-secret-in-production'
    SQLALCHEMY_DATABASE_URI = os.environ.get('BOOKLIB_DATABASE_URL') or \
        "sqlite:///" + os.path.join(BASE_DIR, "booklibrary.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Blob store root; namespaces (pdfs/, covers/) are created below it
    UPLOAD_FOLDER = os.environ.get('BOOKLIB_UPLOAD_FOLDER') or os.path.join(BASE_DIR, "uploads")

    # Per-file limits, checked by the book manager
    PDF_MAX_BYTES = 10 * 1024 * 1024
    COVER_MAX_BYTES = 2 * 1024 * 1024
    # Whole request limit, enforced by Flask (413)
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024

    LOG_LEVEL = os.environ.get('BOOKLIB_LOG_LEVEL', 'INFO')

    # Security headers (Talisman)
    FORCE_HTTPS = _env_flag('BOOKLIB_FORCE_HTTPS')
    CONTENT_SECURITY_POLICY = {
        'default-src': ["'self'"],
        'style-src': ["'self'", "'unsafe-inline'"],
        'img-src': ["'self'", "data:"],
    }

    WTF_CSRF_ENABLED = True


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'testing-secret'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    WTF_CSRF_ENABLED = False
    FORCE_HTTPS = False
    LOG_LEVEL = 'DEBUG'
