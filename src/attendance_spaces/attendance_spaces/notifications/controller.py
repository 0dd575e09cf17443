from __future__ import annotations

import logging

from flask import Flask, flash, redirect, render_template, session, url_for

from ..common.web import login_required
from ..core.exceptions import StoreError, ValidationError
from ..container import Container
from .service import Inbox

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _user_id() -> str:
        return str(session["user_id"])

    @app.route("/notifications", endpoint="notifications")
    @login_required
    def notifications():
        try:
            inbox = container.notification_service.inbox(_user_id())
        except StoreError:
            logger.exception("notifications load failed")
            flash("Failed to load notifications", "danger")
            inbox = Inbox(items=[])
        return render_template("notifications/list.html", inbox=inbox)

    @app.route("/notifications/<notification_id>/read", methods=["POST"], endpoint="notification_read")
    @login_required
    def notification_read(notification_id: str):
        try:
            container.notification_service.mark_read(user_id=_user_id(), notification_id=notification_id)
        except ValidationError as e:
            flash(str(e), "warning")
        except StoreError:
            logger.exception("mark read failed for %s", notification_id)
            flash("Failed to update notification", "danger")
        return redirect(url_for("notifications"))

    @app.route("/notifications/read-all", methods=["POST"], endpoint="notifications_read_all")
    @login_required
    def notifications_read_all():
        try:
            count = container.notification_service.mark_all_read(_user_id())
            flash(f"{count} notification(s) marked as read.", "success")
        except StoreError:
            logger.exception("mark all read failed")
            flash("Failed to update notifications", "danger")
        return redirect(url_for("notifications"))
