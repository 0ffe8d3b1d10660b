from datetime import datetime, timezone

from flask import jsonify, url_for

from copabet import limiter
from copabet.routes.main import bp


@bp.route("/")
def index():
    """Entry points of the JSON API"""
    return jsonify(
        {
            "name": "CopaBet",
            "leaderboard": url_for("api.leaderboard"),
            "matches": url_for("api.matches"),
            "login": url_for("auth.login"),
        }
    )


@bp.route("/health")
@limiter.exempt
def health():
    """Health check endpoint - exempt from rate limiting for monitoring systems"""
    return jsonify(
        {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}
    )
