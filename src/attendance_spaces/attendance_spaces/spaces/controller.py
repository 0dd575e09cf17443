from __future__ import annotations

import io
import logging

from flask import Flask, flash, redirect, render_template, request, send_file, session, url_for

from ..common.datetime_utils import parse_local_datetime
from ..common.web import login_required, render_forbidden
from ..core.enums import FieldKind, SpaceStatus, SpaceType
from ..core.exceptions import AuthorizationError, StoreError, ValidationError
from ..container import Container
from ..submissions.report import export_columns
from .qr import render_qr_png
from .service import NewCustomField, NewSpace

logger = logging.getLogger(__name__)


def _custom_fields_from_form(form) -> list[NewCustomField]:
    """Rows arrive as parallel lists; blank names are skipped."""

    names = form.getlist("field_name")
    kinds = form.getlist("field_type")
    required = form.getlist("field_required")

    out: list[NewCustomField] = []
    for idx, name in enumerate(names):
        if not (name or "").strip():
            continue
        kind = kinds[idx] if idx < len(kinds) else FieldKind.TEXT.value
        req = required[idx] if idx < len(required) else "1"
        out.append(NewCustomField(name=name, kind=kind, required=req not in {"0", "false", "off", ""}))
    return out


def register(app: Flask, container: Container) -> None:
    def _user_id() -> str:
        return str(session["user_id"])

    @app.route("/dashboard", endpoint="dashboard")
    @login_required
    def dashboard():
        try:
            summaries = container.space_service.list_dashboard(_user_id())
        except StoreError:
            logger.exception("dashboard load failed")
            flash("Failed to load spaces", "danger")
            summaries = []
        return render_template("spaces/dashboard.html", summaries=summaries, name=session.get("name"))

    @app.route("/spaces/new", methods=["GET", "POST"], endpoint="create_space")
    @login_required
    def create_space():
        types = [t.value for t in SpaceType]
        kinds = [k.value for k in FieldKind]

        if request.method == "POST":
            try:
                data = NewSpace(
                    title=request.form.get("title", ""),
                    space_type=request.form.get("type", SpaceType.CLASS.value),
                    custom_fields=_custom_fields_from_form(request.form),
                    start_time=parse_local_datetime(request.form.get("start_time", "")),
                    end_time=parse_local_datetime(request.form.get("end_time", "")),
                )
            except ValueError as e:
                flash(str(e), "danger")
                return render_template("spaces/create.html", types=types, kinds=kinds, form=request.form), 400

            try:
                space = container.space_service.create_space(
                    admin_id=_user_id(),
                    data=data,
                    link_for=lambda code: url_for("attend", code=code, _external=True),
                )
            except ValidationError as e:
                flash(str(e), "danger")
                return render_template("spaces/create.html", types=types, kinds=kinds, form=request.form), 400
            except StoreError:
                logger.exception("create space failed")
                flash("Failed to create attendance space", "danger")
                return render_template("spaces/create.html", types=types, kinds=kinds, form=request.form)

            flash("Attendance space created successfully!", "success")
            return render_template("spaces/created.html", space=space)

        return render_template("spaces/create.html", types=types, kinds=kinds, form={})

    @app.route("/spaces/<space_id>", endpoint="space_detail")
    @login_required
    def space_detail(space_id: str):
        try:
            space = container.space_service.get_owned_space(current_user_id=_user_id(), space_id=space_id)
        except AuthorizationError as e:
            return render_forbidden(str(e))
        except ValidationError as e:
            flash(str(e), "warning")
            return redirect(url_for("dashboard"))

        try:
            records = container.report_service.list_records(space)
        except StoreError:
            logger.exception("records load failed for %s", space_id)
            flash("Failed to load attendance records", "danger")
            records = []

        return render_template(
            "spaces/detail.html",
            space=space,
            records=records,
            columns=export_columns(space, records),
            statuses=[s.value for s in SpaceStatus],
        )

    @app.route("/spaces/<space_id>/status", methods=["POST"], endpoint="space_status")
    @login_required
    def space_status(space_id: str):
        status = request.form.get("status", "")
        try:
            container.space_service.set_status(current_user_id=_user_id(), space_id=space_id, status=status)
            flash(f"Space {status} successfully", "success")
        except AuthorizationError as e:
            return render_forbidden(str(e))
        except ValidationError as e:
            flash(str(e), "warning")
        except StoreError:
            logger.exception("status update failed for %s", space_id)
            flash("Failed to update space status", "danger")
        if request.form.get("back") == "dashboard":
            return redirect(url_for("dashboard"))
        return redirect(url_for("space_detail", space_id=space_id))

    @app.route("/spaces/<space_id>/qr.png", endpoint="space_qr")
    @login_required
    def space_qr(space_id: str):
        try:
            space = container.space_service.get_owned_space(current_user_id=_user_id(), space_id=space_id)
        except AuthorizationError as e:
            return render_forbidden(str(e))
        except ValidationError:
            return render_template("404.html"), 404

        png = render_qr_png(space.public_link)
        return send_file(io.BytesIO(png), mimetype="image/png", download_name=f"{space.unique_code}.png")

    @app.route("/spaces/<space_id>/export.xlsx", endpoint="space_export")
    @login_required
    def space_export(space_id: str):
        try:
            space = container.space_service.get_owned_space(current_user_id=_user_id(), space_id=space_id)
            export = container.report_service.export_excel(space)
        except AuthorizationError as e:
            return render_forbidden(str(e))
        except ValidationError as e:
            flash(str(e), "info")
            return redirect(url_for("space_detail", space_id=space_id))
        except StoreError:
            logger.exception("export failed for %s", space_id)
            flash("Failed to export attendance records", "danger")
            return redirect(url_for("space_detail", space_id=space_id))

        return send_file(
            io.BytesIO(export.content),
            mimetype=export.mimetype,
            as_attachment=True,
            download_name=export.filename,
        )
