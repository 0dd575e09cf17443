from __future__ import annotations

import logging

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..common.web import login_required
from ..core.exceptions import AuthenticationError, StoreError, ValidationError
from ..container import Container
from .service import SessionUser

logger = logging.getLogger(__name__)


def _safe_next(target: str | None) -> str | None:
    # Only same-site relative paths.
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return None


def register(app: Flask, container: Container) -> None:
    def _start_session(s_user: SessionUser) -> None:
        session.clear()
        session["user_id"] = s_user.user_id
        session["email"] = s_user.email
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value

    @app.route("/", methods=["GET", "POST"], endpoint="index")
    def index():
        if request.method == "POST":
            code = (request.form.get("code") or "").strip()
            if not code:
                flash("Please enter an attendance code.", "warning")
                return render_template("index.html"), 400
            return redirect(url_for("attend", code=code))
        return render_template("index.html")

    @app.route("/login", methods=["GET", "POST"], endpoint="login")
    def login():
        next_url = _safe_next(request.values.get("next"))
        if "user_id" in session:
            return redirect(next_url or url_for("dashboard"))

        if request.method == "POST":
            email = request.form.get("email", "")
            password = request.form.get("password", "")
            try:
                _start_session(container.auth_service.authenticate(email, password))
                flash("Signed in.", "success")
                return redirect(next_url or url_for("dashboard"))
            except (AuthenticationError, ValidationError) as e:
                flash(str(e), "danger")
            except StoreError:
                logger.exception("login failed")
                flash("System error while signing in", "danger")

        return render_template("auth/login.html", next=next_url or "")

    @app.route("/signup", methods=["GET", "POST"], endpoint="signup")
    def signup():
        if request.method == "POST":
            try:
                s_user = container.auth_service.sign_up(
                    email=request.form.get("email", ""),
                    password=request.form.get("password", ""),
                    full_name=request.form.get("full_name", ""),
                )
                _start_session(s_user)
                flash("Account created.", "success")
                return redirect(url_for("dashboard"))
            except ValidationError as e:
                flash(str(e), "danger")
            except StoreError:
                logger.exception("signup failed")
                flash("System error while creating the account", "danger")

        return render_template("auth/signup.html")

    @app.route("/profile", endpoint="profile")
    @login_required
    def profile():
        try:
            user = container.profile_service.get_profile(str(session["user_id"]))
        except ValidationError as e:
            flash(str(e), "warning")
            return redirect(url_for("dashboard"))
        except StoreError:
            logger.exception("profile load failed")
            flash("Failed to load profile", "danger")
            return redirect(url_for("dashboard"))
        return render_template("auth/profile.html", user=user)

    @app.route("/logout", endpoint="logout")
    def logout():
        session.clear()
        flash("Signed out.", "info")
        return redirect(url_for("index"))
