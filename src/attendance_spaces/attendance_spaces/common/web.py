from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import flash, redirect, render_template, request, session, url_for

from ..users.model import Identity


def current_identity() -> Optional[Identity]:
    user_id = session.get("user_id")
    if not user_id:
        return None
    return Identity(user_id=str(user_id), email=str(session.get("email") or ""))


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            flash("Please sign in to continue.", "warning")
            return redirect(url_for("login", next=request.path))
        return view(*args, **kwargs)

    return wrapper


def render_forbidden(message: str = "You do not have access to this page."):
    current_user = {"full_name": session.get("name"), "role": session.get("role")}
    return render_template("403.html", current_user=current_user, message=message), 403
