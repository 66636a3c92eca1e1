from flask import Blueprint, Response, request, jsonify
from datetime import timedelta
from functools import wraps
import json
import jwt

from exports import export_csv, export_filename, export_json
from services import get_services
from utils import utcnow, verify_password

teacher_bp = Blueprint("teacher", __name__)


# -------------------------------------------------
# AUTH DECORATOR
# -------------------------------------------------
def require_auth(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        settings = get_services().settings
        if not settings.auth_enabled:
            return f(*args, **kwargs)

        token = request.headers.get("Authorization", "")
        if token.lower().startswith("bearer "):
            token = token[7:]
        if not token:
            return jsonify({"success": False, "error": "missing token"}), 401
        try:
            jwt.decode(token, settings.jwt_secret, algorithms=["HS256"])
        except jwt.ExpiredSignatureError:
            return jsonify({"success": False, "error": "token expired"}), 401
        except jwt.InvalidTokenError:
            return jsonify({"success": False, "error": "invalid token"}), 401
        return f(*args, **kwargs)
    return wrapper


# -------------------------------------------------
# LOGIN
# -------------------------------------------------
@teacher_bp.post("/login")
def login_teacher():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        data = {}
    services = get_services()
    if not services.settings.auth_enabled:
        return jsonify({"success": False, "error": "operator login is not enabled"}), 404

    password = data.get("password") or ""
    if not verify_password(password, services.operator_password_hash):
        return jsonify({"success": False, "error": "invalid credentials"}), 401

    payload = {
        "role": "operator",
        "exp": utcnow() + timedelta(hours=1),
    }
    token = jwt.encode(payload, services.settings.jwt_secret, algorithm="HS256")
    return jsonify({"success": True, "token": token})


# -------------------------------------------------
# VERIFY TOKEN
# -------------------------------------------------
@teacher_bp.get("/verify-token")
@require_auth
def verify_token():
    return jsonify({"success": True, "message": "Token is valid"})


# -------------------------------------------------
# RELOAD / CLEAR
# -------------------------------------------------
@teacher_bp.post("/reload")
@require_auth
def reload_moods():
    board = get_services().board
    if not board.bulk_load():
        return jsonify({"success": False, "error": "could not load moods, previous board kept"}), 502
    return jsonify({"success": True, "count": len(board.snapshot())})


@teacher_bp.post("/clear")
@require_auth
def clear_moods():
    if not get_services().board.clear_all():
        return jsonify({"success": False, "error": "could not clear moods"}), 502
    return jsonify({"success": True, "message": "all moods cleared"})


# -------------------------------------------------
# EXPORT
# -------------------------------------------------
def _attachment(content: str, filename: str, content_type: str) -> Response:
    return Response(
        content,
        content_type=content_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@teacher_bp.get("/export.csv")
@require_auth
def export_moods_csv():
    services = get_services()
    snapshot = services.board.snapshot()
    if not snapshot.entries:
        return jsonify({"success": False, "error": "no mood codes to export"}), 404

    content = export_csv(snapshot, services.settings.schema)
    return _attachment(content, export_filename(snapshot, "csv"), "text/csv; charset=utf-8")


@teacher_bp.get("/export.json")
@require_auth
def export_moods_json():
    services = get_services()
    snapshot = services.board.snapshot()
    if not snapshot.entries:
        return jsonify({"success": False, "error": "no mood codes to export"}), 404

    content = json.dumps(export_json(snapshot, services.settings.schema), ensure_ascii=False, indent=2)
    return _attachment(content, export_filename(snapshot, "json"), "application/json; charset=utf-8")
