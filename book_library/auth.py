"""Login/logout routes and the Flask-Login hooks."""
import logging
from urllib.parse import urlparse

from flask import Blueprint, flash, jsonify, redirect, request, url_for
from flask_login import current_user, login_required, login_user, logout_user

from .extensions import db, login_manager
from .forms import ConfirmForm, LoginForm
from .models import User
from .templates import LOGIN_TEMPLATE, render_page

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


@login_manager.user_loader
def load_user(user_id):
    try:
        return db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        return None


@login_manager.unauthorized_handler
def unauthorized():
    if request.path.startswith('/api/'):
        return jsonify({"message": "Authentication required"}), 401
    flash("Please log in to continue.", "info")
    return redirect(url_for('auth.login', next=request.path))


def _safe_next(target):
    # Only local paths, never another host
    if not target:
        return None
    parsed = urlparse(target)
    if parsed.scheme or parsed.netloc or not target.startswith('/'):
        return None
    return target


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    next_url = _safe_next(request.args.get('next'))
    if current_user.is_authenticated:
        return redirect(next_url or url_for('books.books_list'))

    form = LoginForm()
    if form.validate_on_submit():
        user = User.query.filter_by(username=form.username.data.strip()).first()
        if user is not None and user.check_password(form.password.data):
            login_user(user)
            logger.info("user logged in id=%s", user.id)
            flash("Logged in.", "success")
            return redirect(next_url or url_for('books.books_list'))
        logger.info("failed login for username=%s", form.username.data)
        flash("Invalid username or password.", "error")
    return render_page(LOGIN_TEMPLATE, title="Log in", form=form, next_url=next_url)


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    form = ConfirmForm()
    if form.validate_on_submit():
        logout_user()
        flash("Logged out.", "info")
        return redirect(url_for('auth.login'))
    return redirect(url_for('books.books_list'))
