from __future__ import annotations

import logging

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..common.web import login_required, render_forbidden
from ..core.enums import CommunityType
from ..core.exceptions import AuthorizationError, StoreError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _user_id() -> str:
        return str(session["user_id"])

    def _back(community_id: str):
        return redirect(url_for("community_detail", community_id=community_id))

    @app.route("/communities", methods=["GET", "POST"], endpoint="communities")
    @login_required
    def communities():
        if request.method == "POST":
            try:
                community = container.community_service.create_community(
                    creator_id=_user_id(),
                    name=request.form.get("name", ""),
                    description=request.form.get("description", ""),
                    community_type=request.form.get("type", CommunityType.PUBLIC.value),
                )
                flash(f"Community created. Invite code: {community.invite_code}", "success")
                return _back(community.community_id)
            except ValidationError as e:
                flash(str(e), "danger")
            except StoreError:
                logger.exception("create community failed")
                flash("Failed to create community", "danger")

        try:
            summaries = container.community_service.list_for_viewer(_user_id())
        except StoreError:
            logger.exception("communities load failed")
            flash("Failed to load communities", "danger")
            summaries = []
        return render_template(
            "communities/list.html",
            summaries=summaries,
            types=[t.value for t in CommunityType],
        )

    @app.route("/communities/join", methods=["POST"], endpoint="community_join_code")
    @login_required
    def community_join_code():
        try:
            community = container.community_service.join_by_code(
                user_id=_user_id(),
                invite_code=request.form.get("invite_code", ""),
                display_name=session.get("name") or "",
            )
        except ValidationError as e:
            flash(str(e), "warning")
            return redirect(url_for("communities"))
        except StoreError:
            logger.exception("join by code failed")
            flash("Failed to join community", "danger")
            return redirect(url_for("communities"))

        flash(f"Joined {community.name}.", "success")
        return _back(community.community_id)

    @app.route("/communities/<community_id>", endpoint="community_detail")
    @login_required
    def community_detail(community_id: str):
        try:
            view = container.community_service.view(viewer_id=_user_id(), community_id=community_id)
        except AuthorizationError as e:
            return render_forbidden(str(e))
        except ValidationError as e:
            flash(str(e), "warning")
            return redirect(url_for("communities"))
        return render_template("communities/detail.html", view=view, community=view.community)

    @app.route("/communities/<community_id>/join", methods=["POST"], endpoint="community_join")
    @login_required
    def community_join(community_id: str):
        try:
            container.community_service.join(
                user_id=_user_id(),
                community_id=community_id,
                display_name=session.get("name") or "",
            )
            flash("Joined community.", "success")
        except AuthorizationError as e:
            return render_forbidden(str(e))
        except ValidationError as e:
            flash(str(e), "warning")
        except StoreError:
            logger.exception("join failed for %s", community_id)
            flash("Failed to join community", "danger")
        return _back(community_id)

    @app.route("/communities/<community_id>/leave", methods=["POST"], endpoint="community_leave")
    @login_required
    def community_leave(community_id: str):
        try:
            container.community_service.leave(user_id=_user_id(), community_id=community_id)
        except ValidationError as e:
            flash(str(e), "warning")
            return _back(community_id)
        except StoreError:
            logger.exception("leave failed for %s", community_id)
            flash("Failed to leave community", "danger")
            return _back(community_id)

        flash("You left the community.", "info")
        return redirect(url_for("communities"))

    @app.route("/communities/<community_id>/posts", methods=["POST"], endpoint="community_post")
    @login_required
    def community_post(community_id: str):
        try:
            container.community_service.create_post(
                author_id=_user_id(),
                community_id=community_id,
                title=request.form.get("title", ""),
                content=request.form.get("content", ""),
                is_public=request.form.get("is_public") in {"1", "on", "true"},
            )
            flash("Post published.", "success")
        except AuthorizationError as e:
            return render_forbidden(str(e))
        except ValidationError as e:
            flash(str(e), "danger")
        except StoreError:
            logger.exception("post failed for %s", community_id)
            flash("Failed to publish post", "danger")
        return _back(community_id)
