"""
Identity endpoints.

Registration and login are a thin wrapper around Flask-Login; the quiz and
access services only consume ``current_user.id`` and ``current_user.role``.
"""
from flask import jsonify, request, current_app
from flask_login import login_user, logout_user, login_required, current_user
from sqlalchemy.exc import IntegrityError

from quizknow import db
from quizknow.auth import auth_bp
from quizknow.auth.models import User
from quizknow.auth.utils import hash_password, verify_password, is_valid_email, validate_password
from quizknow.common.time_utils import utcnow
from quizknow.config import config
from quizknow.security.security_logger import SecurityLogger


@auth_bp.route("/register", methods=["POST"])
def register():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    role = (data.get("role") or "student").strip().lower()
    first_name = (data.get("first_name") or "").strip()
    last_name = (data.get("last_name") or "").strip()
    username = (data.get("username") or "").strip() or None

    if not email or not password or not first_name or not last_name:
        return jsonify({"success": False, "error": "email, password, first_name and last_name are required"}), 400

    if not is_valid_email(email):
        return jsonify({"success": False, "error": "Please provide a valid email address"}), 400

    is_valid, message = validate_password(password)
    if not is_valid:
        return jsonify({"success": False, "error": message}), 400

    # Admin accounts are provisioned out of band
    if role not in config.VALID_USER_TYPES or role == "admin":
        return jsonify({"success": False, "error": "Invalid role"}), 400

    user = User(
        email=email,
        username=username,
        password_hash=hash_password(password),
        role=role,
        first_name=first_name,
        last_name=last_name,
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({"success": False, "error": "Email or username already registered"}), 409

    current_app.logger.info(f"Registered {role} account {user.id}")
    return jsonify({"success": True, "user": user.to_public_dict()}), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    remember = bool(data.get("remember", False))

    if not email or not password:
        return jsonify({"success": False, "error": "Email and password are required"}), 400

    user = User.query.filter_by(email=email).first()
    if not user or not verify_password(password, user.password_hash):
        SecurityLogger.log_failed_login(email)
        return jsonify({"success": False, "error": "Invalid email or password"}), 401

    if not user.is_active_account:
        SecurityLogger.log_failed_login(email, reason="Account disabled")
        return jsonify({"success": False, "error": "Account is disabled"}), 403

    user.last_login = utcnow()
    db.session.commit()
    login_user(user, remember=remember)

    return jsonify({"success": True, "user": user.to_public_dict()}), 200


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return jsonify({"success": True, "message": "Logged out"}), 200


@auth_bp.route("/me")
@login_required
def me():
    return jsonify({"success": True, "user": current_user.to_public_dict()}), 200
