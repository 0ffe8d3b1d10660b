import logging

from flask import jsonify
from flask_login import current_user, login_required, login_user, logout_user

from copabet import db, limiter, login_manager
from copabet.forms.auth import ChangePasswordForm, LoginForm
from copabet.models import User
from copabet.routes.auth import bp

logger = logging.getLogger(__name__)


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"error": "Authentication required"}), 401


@bp.route("/login", methods=["POST"])
@limiter.limit("10 per minute")
def login():
    form = LoginForm()
    if not form.validate():
        return jsonify({"error": "Invalid input", "fields": form.error_messages}), 400

    user = User.query.filter_by(username=form.username.data).first()
    if user is None or not user.check_password(form.password.data):
        logger.warning(f"Failed login attempt for username '{form.username.data}'")
        return jsonify({"error": "Invalid username or password"}), 401

    login_user(user, remember=form.remember_me.data)
    user.update_last_login()
    logger.info(f"User {user.username} logged in")

    return jsonify({"user": user.to_dict()})


@bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return jsonify({"success": True})


@bp.route("/me")
@login_required
def me():
    return jsonify({"user": current_user.to_dict()})


@bp.route("/change-password", methods=["POST"])
@login_required
@limiter.limit("20 per hour")
def change_password():
    form = ChangePasswordForm()
    if not form.validate():
        return jsonify({"error": "Invalid input", "fields": form.error_messages}), 400

    if not current_user.check_password(form.current_password.data):
        return jsonify({"error": "Current password is incorrect"}), 400

    current_user.set_password(form.new_password.data)
    db.session.commit()
    logger.info(f"User {current_user.username} changed their password")

    return jsonify({"success": True, "message": "Password updated successfully"})
