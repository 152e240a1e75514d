"""
Catch Game Server — Flask Server
API for the receiver/QB catch game: random players, catches and images,
plus admin add/delete over the players sheet.
"""

import logging

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from catch_server import catch_feed, config, images, sheets
from catch_server.errors import CatchServerError, EmptySequenceError, InvalidInputError
from catch_server.players import PlayersRegistry, serializer_for
from catch_server.selection import is_touchdown, uniform, weighted_reward_pick

# ─── Setup ───
app = Flask(__name__, static_folder=None)
CORS(app)
logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
log = logging.getLogger("catch-server")

CATCH_MODES = ("normal", "sb")


def players_registry():
    """Registry over the configured players tab, sharing that tab's write serializer."""
    gateway = sheets.players_gateway()
    serializer = serializer_for(gateway.store_id, timeout=config.WRITE_LOCK_TIMEOUT_SECONDS)
    return PlayersRegistry(gateway, serializer=serializer)


def _name_from_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = request.form
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise InvalidInputError("Missing name")
    return name


# ═══════════════════════════════════════
# ERRORS
# ═══════════════════════════════════════

@app.errorhandler(CatchServerError)
def handle_catch_server_error(e):
    if e.status_code >= 500:
        log.warning(f"{request.method} {request.path} failed: {e.message} ({e.details or '-'})")
    return jsonify(e.to_dict()), e.status_code


@app.errorhandler(HTTPException)
def handle_http_error(e):
    return jsonify({"error": e.name}), e.code


@app.errorhandler(Exception)
def handle_unexpected_error(e):
    log.exception(f"Unhandled error on {request.method} {request.path}")
    return jsonify({"error": "Internal server error", "details": str(e)}), 500


@app.after_request
def no_store_random(resp):
    """Random picks must never be served from a cache."""
    if request.path.startswith("/api/random-"):
        resp.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, proxy-revalidate"
        resp.headers["Pragma"] = "no-cache"
        resp.headers["Expires"] = "0"
    return resp


# ═══════════════════════════════════════
# RANDOM PICKS
# ═══════════════════════════════════════

@app.route("/api/random-player")
def api_random_player():
    """Return one random name from the players sheet."""
    players = players_registry().list_all()
    if not players:
        raise EmptySequenceError("No players found")
    return jsonify({"name": uniform(players)})


@app.route("/api/random-catch")
def api_random_catch():
    """Return one catch outcome. mode=sb rolls touchdowns at CATCH_TOUCHDOWN_RATE."""
    mode = request.args.get("mode", "normal").strip().lower() or "normal"
    if mode not in CATCH_MODES:
        raise InvalidInputError(f"Unknown mode: {mode}", details=f"expected one of {', '.join(CATCH_MODES)}")

    catches = catch_feed.fetch_catches()
    if not catches:
        raise EmptySequenceError("No catches found")

    if mode == "sb":
        pick = weighted_reward_pick(catches, is_touchdown, config.CATCH_TOUCHDOWN_RATE)
    else:
        pick = uniform(catches)
    return jsonify({"catch": pick})


@app.route("/api/random-image")
def api_random_image():
    """Return a random image URL for type=QB|receiver."""
    return jsonify({"url": images.random_image_url(request.args.get("type", "QB"))})


@app.route("/api/random-image-batch")
def api_random_image_batch():
    """Return n random image URLs (for the spin reel)."""
    n = images.parse_batch_size(request.args.get("n"))
    return jsonify({"urls": images.random_image_urls(request.args.get("type", "QB"), n)})


# ═══════════════════════════════════════
# ADMIN: RECEIVER PLAYERS
# ═══════════════════════════════════════

@app.route("/api/admin/receiver-players", methods=["GET"])
def api_list_players():
    return jsonify({"players": players_registry().list_all()})


@app.route("/api/admin/receiver-players", methods=["POST"])
def api_add_player():
    """Add a player unless a same-named one (case/whitespace-insensitive) is already listed."""
    name = _name_from_body()
    result = players_registry().add(name)
    return jsonify({"ok": True, "added": result.added, "players": result.players})


@app.route("/api/admin/receiver-players", methods=["DELETE"])
def api_delete_player():
    """Delete every row matching the name."""
    name = _name_from_body()
    result = players_registry().delete_all_matching(name)
    return jsonify({"ok": True, "deletedCount": result.deleted_count, "players": result.players})


@app.route("/api/health")
def api_health():
    return jsonify({"ok": True})


# ═══════════════════════════════════════
# STARTUP
# ═══════════════════════════════════════

if __name__ == "__main__":
    log.info("=" * 50)
    log.info("Catch Game Server — Starting server")
    log.info(f"Players source: Google Sheet {config.PLAYERS_SHEET_ID or '(unset)'} (tab {config.PLAYERS_TAB_NAME})")
    log.info(f"Catch feed: {config.RECEIVERS_SHEET_URL or '(unset)'}")
    log.info(f"Images: {config.IMAGES_DIR}")
    log.info(f"Server: http://localhost:{config.SERVER_PORT}")
    log.info("=" * 50)

    app.run(
        host=config.SERVER_HOST,
        port=config.SERVER_PORT,
        debug=config.DEBUG,
        threaded=True,  # concurrent requests; sheet writes are serialized per tab
    )
