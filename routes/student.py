from flask import Blueprint, request, jsonify

from exports import emoji_visualization, stats
from guard import SubmissionStatus
from models import EMOJI_PALETTE, LANGUAGE_LABELS, MoodCandidate
from services import get_services
from snippets import render_card

student_bp = Blueprint("student", __name__)

STATUS_CODES = {
    SubmissionStatus.ACCEPTED: 201,
    SubmissionStatus.ACCEPTED_LOCAL: 202,
    SubmissionStatus.INVALID: 400,
    SubmissionStatus.DUPLICATE: 409,
    SubmissionStatus.BUSY: 429,
    SubmissionStatus.FAILED: 503,
}


# -------------------------------------------------
# FORM OPTIONS
# -------------------------------------------------
@student_bp.get("/palette")
def palette():
    return jsonify({
        "success": True,
        "emojis": list(EMOJI_PALETTE),
        "languages": [
            {"value": language.value, "label": label}
            for language, label in LANGUAGE_LABELS.items()
        ],
    })


# -------------------------------------------------
# SUBMIT MOOD
# -------------------------------------------------
@student_bp.post("/submit")
def submit_mood():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        data = {}
    services = get_services()
    schema = services.settings.schema

    candidate = MoodCandidate(
        participant=data.get(schema.participant),
        emoji=data.get(schema.emoji),
        language=data.get(schema.language),
        comment=data.get(schema.comment),
    )
    client_id = request.headers.get("X-Client-Id") or request.remote_addr or "anonymous"

    outcome = services.guard.submit(candidate, client_id)

    body = {"success": outcome.ok, "status": outcome.status.value}
    if outcome.ok:
        body["message"] = outcome.message
        body["mood"] = schema.to_row(outcome.entry)
    else:
        body["error"] = outcome.message
    return jsonify(body), STATUS_CODES[outcome.status]


# -------------------------------------------------
# LIVE BOARD
# -------------------------------------------------
@student_bp.get("/moods")
def list_moods():
    services = get_services()
    snapshot = services.board.snapshot()
    schema = services.settings.schema
    return jsonify({
        "success": True,
        "mode": snapshot.mode,
        "moods": [render_card(entry, snapshot.taken_at, schema) for entry in snapshot.entries],
    })


@student_bp.get("/stats")
def board_stats():
    snapshot = get_services().board.snapshot()
    return jsonify({
        "success": True,
        **stats(snapshot),
        "visualization": emoji_visualization(snapshot),
    })
