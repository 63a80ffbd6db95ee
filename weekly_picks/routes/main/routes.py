from datetime import datetime, timezone

from flask import current_app, jsonify

from weekly_picks import limiter
from weekly_picks.routes.main import bp


@bp.route("/health")
@limiter.exempt
def health():
    """Health check endpoint - exempt from rate limiting for monitoring systems"""
    return jsonify(
        {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": current_app.config.get("FLASK_ENV", "development"),
        }
    )
