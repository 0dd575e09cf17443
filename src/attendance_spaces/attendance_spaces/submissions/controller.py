from __future__ import annotations

from dataclasses import replace
from typing import Mapping, Optional, Sequence

from flask import Flask, flash, jsonify, render_template, request

from ..common.web import current_identity
from ..core.enums import ResolutionState
from ..core.exceptions import (
    InvalidCode,
    SessionNotFound,
    SessionRejected,
    SubmissionFailed,
    ValidationFailed,
)
from ..container import Container
from ..spaces.model import Space
from ..spaces.resolver import Resolution
from .form import FormField, build_form
from .model import RequestMeta

_TOKEN_FIELD = "submission_token"
_MAX_USER_AGENT = 512


def _request_meta() -> RequestMeta:
    forwarded = (request.headers.get("X-Forwarded-For") or "").split(",")[0].strip()
    user_agent = request.headers.get("User-Agent") or None
    return RequestMeta(
        ip_address=forwarded or request.remote_addr,
        user_agent=user_agent[:_MAX_USER_AGENT] if user_agent else None,
    )


def _with_values(fields: Sequence[FormField], values: Mapping[str, object]) -> list[FormField]:
    out = []
    for f in fields:
        raw = values.get(f.key)
        if isinstance(raw, (list, tuple)):
            raw = raw[0] if raw else ""
        out.append(replace(f, initial="" if raw is None else str(raw)))
    return out


def _space_json(space: Space) -> dict:
    return {
        "id": space.space_id,
        "title": space.title,
        "type": space.space_type.value,
        "status": space.status.value,
        "unique_code": space.unique_code,
        "start_time": space.start_time.isoformat() if space.start_time else None,
        "end_time": space.end_time.isoformat() if space.end_time else None,
    }


def _field_json(f: FormField) -> dict:
    return {"key": f.key, "label": f.label, "type": f.kind.value, "required": f.required, "initial": f.initial}


def register(app: Flask, container: Container) -> None:
    writer = container.submission_writer
    resolver = container.session_resolver

    def _render_unavailable(resolution: Resolution, message: Optional[str] = None):
        if resolution.state == ResolutionState.NOT_FOUND:
            return render_template("attend/unavailable.html", message="Attendance session not found", space=None), 404
        reason = resolution.reason.value if resolution.reason else "closed"
        return (
            render_template(
                "attend/unavailable.html",
                message=message or str(SessionRejected(reason)),
                space=resolution.space,
                reason=reason,
            ),
            200,
        )

    def _render_form(space: Space, fields, token: Optional[str], errors=None, status: int = 200):
        return (
            render_template(
                "attend/form.html",
                space=space,
                fields=fields,
                submission_token=token or "",
                errors=errors or {},
            ),
            status,
        )

    @app.route("/attend/", defaults={"code": ""}, methods=["GET", "POST"], endpoint="attend_blank")
    @app.route("/attend/<code>", methods=["GET", "POST"], endpoint="attend")
    def attend(code: str):
        identity = current_identity()

        try:
            if request.method == "GET":
                view = writer.open_form(code, identity)
                if not view.resolution.accepting:
                    return _render_unavailable(view.resolution)
                return _render_form(view.resolution.space, view.fields, view.submission_token)

            resolution = resolver.resolve(code)
        except InvalidCode as e:
            return render_template("attend/unavailable.html", message=str(e), space=None), 400

        if not resolution.accepting:
            return _render_unavailable(resolution)

        space = resolution.space
        values = request.form.to_dict(flat=False)
        token = (values.pop(_TOKEN_FIELD, None) or [""])[0]

        try:
            outcome = writer.submit(
                code,
                values,
                identity=identity,
                submission_token=token,
                meta=_request_meta(),
            )
        except SessionNotFound:
            return _render_unavailable(Resolution(ResolutionState.NOT_FOUND))
        except SessionRejected:
            return _render_unavailable(resolver.resolve(code))
        except ValidationFailed as e:
            fields = _with_values(build_form(space.required_fields), values)
            return _render_form(space, fields, token, errors=e.errors, status=400)
        except SubmissionFailed as e:
            flash(str(e), "danger")
            fields = _with_values(build_form(space.required_fields), values)
            return _render_form(space, fields, token)

        flash(outcome.notification.message, outcome.notification.category)
        return render_template("attend/submitted.html", space=outcome.space, outcome=outcome)

    @app.route("/api/attend/<code>", methods=["GET"], endpoint="api_attend_form")
    def api_attend_form(code: str):
        try:
            view = writer.open_form(code, current_identity())
        except InvalidCode as e:
            return jsonify({"success": False, "state": "invalid", "message": str(e)}), 400

        resolution = view.resolution
        if resolution.state == ResolutionState.NOT_FOUND:
            return jsonify({"success": False, "state": resolution.state.value, "message": str(SessionNotFound())}), 404

        body = {
            "success": True,
            "state": resolution.state.value,
            "space": _space_json(resolution.space),
        }
        if resolution.accepting:
            body["fields"] = [_field_json(f) for f in view.fields]
            body["submission_token"] = view.submission_token
        else:
            body["reason"] = resolution.reason.value if resolution.reason else None
            body["message"] = str(SessionRejected(body["reason"] or "closed"))
        return jsonify(body), 200

    @app.route("/api/attend/<code>", methods=["POST"], endpoint="api_attend_submit")
    def api_attend_submit(code: str):
        data = request.get_json(silent=True)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            return jsonify({"success": False, "message": "Request body must be a JSON object"}), 400
        fields = data.get("fields") if isinstance(data.get("fields"), dict) else {}

        try:
            outcome = writer.submit(
                code,
                fields,
                identity=current_identity(),
                submission_token=data.get(_TOKEN_FIELD),
                meta=_request_meta(),
            )
        except InvalidCode as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except SessionNotFound as e:
            return jsonify({"success": False, "message": str(e)}), 404
        except SessionRejected as e:
            return jsonify({"success": False, "reason": e.reason, "message": str(e)}), 409
        except ValidationFailed as e:
            return jsonify({"success": False, "message": str(e), "errors": e.errors}), 400
        except SubmissionFailed as e:
            return jsonify({"success": False, "message": str(e)}), 502

        body = {
            "success": True,
            "duplicate": outcome.duplicate,
            "title": outcome.notification.title,
            "message": outcome.notification.message,
        }
        if outcome.record is not None:
            body["record"] = {
                "id": outcome.record.record_id,
                "space_id": outcome.record.space_id,
                "user_id": outcome.record.user_id,
                "fields": dict(outcome.record.fields),
                "submitted_at": outcome.record.submitted_at.isoformat(),
            }
        return jsonify(body), (200 if outcome.duplicate else 201)
