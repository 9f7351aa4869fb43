"""
Book Library Flask application.

Features:
- Books CRUD with an uploaded PDF and cover image per book
- PDF viewer endpoint streaming the stored file inline
- Books list showing every book plus the ones the signed-in user added
- Server-side validation with per-field messages, flash messages on redirects
- Uploaded files kept in a filesystem blob store; replaced and deleted
  files are removed along with the records that referenced them
- Login via Flask-Login, CSRF protection (Flask-WTF), security headers (Talisman)
- Read-only JSON endpoints under /api/v/books
- CLI: init-db, create-user, add-category

Run:
    flask --app book_library init-db --seed
    flask --app book_library create-user alice
    flask --app book_library run
"""
import logging
import os

from flask import Flask, flash, jsonify, redirect, request, url_for

from .config import Config
from .extensions import csrf, db, login_manager, talisman
from .storage import BlobStore

LOG_FORMAT = "[book_library] %(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logger = logging.getLogger(__name__)
    logger.setLevel(level)
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)


def create_app(config_object=None, **overrides):
    """
    Create and configure the Flask application
    @param config_object: class or import path of the configuration to use
    @param overrides: individual config values applied last
    @returns: Flask - Configured Flask application instance
    """
    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    app.config.update(overrides)
    configure_logging(app)

    os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)
    app.extensions['blob_store'] = BlobStore(app.config['UPLOAD_FOLDER'])

    db.init_app(app)
    csrf.init_app(app)
    login_manager.init_app(app)
    login_manager.login_view = 'auth.login'
    talisman.init_app(
        app,
        force_https=app.config['FORCE_HTTPS'],
        session_cookie_secure=app.config['FORCE_HTTPS'],
        content_security_policy=app.config['CONTENT_SECURITY_POLICY'],
    )

    from .api import api_bp
    from .auth import auth_bp
    from .cli import register_cli
    from .views import books_bp
    from .templates import ERROR_TEMPLATE, render_page

    app.register_blueprint(books_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(api_bp)
    register_cli(app)

    @app.errorhandler(404)
    def not_found(e):
        if request.path.startswith('/api/'):
            return jsonify({"message": "Not found"}), 404
        return render_page(ERROR_TEMPLATE, title="Not found", code=404, name="Not Found",
                           description="The requested resource was not found."), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        if request.path.startswith('/api/'):
            return jsonify({"message": "Method not allowed"}), 405
        return render_page(ERROR_TEMPLATE, title="Method not allowed", code=405,
                           name="Method Not Allowed", description=e.description), 405

    @app.errorhandler(413)
    def too_large(e):
        flash("The upload is too large.", "error")
        return redirect(request.referrer or url_for('books.books_list'))

    logging.getLogger(__name__).debug("application created upload_folder=%s", app.config['UPLOAD_FOLDER'])
    return app
