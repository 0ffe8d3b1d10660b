from functools import wraps

from flask import abort, current_app, jsonify, request
from flask_login import current_user, login_required
from flask_wtf.csrf import generate_csrf
from sqlalchemy.exc import IntegrityError

from copabet import db
from copabet.forms.auth import CreateUserForm
from copabet.forms.matches import BetForm, MatchForm, ResultForm
from copabet.models import Bet, Match, User
from copabet.routes.api import bp
from copabet.utils.cache_utils import cached_query
from copabet.utils.logging_config import ContextualLogger
from copabet.utils.scoring import FINISHED, SCHEDULED


def add_security_headers(f):
    """Keep per-user API responses out of shared caches"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        response = current_app.make_response(f(*args, **kwargs))
        response.headers["Cache-Control"] = (
            "no-store, no-cache, must-revalidate, max-age=0"
        )
        return response

    return decorated_function


def admin_required(f):
    """Reject non-admin users with 403"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_admin:
            return jsonify({"error": "Admin privileges required"}), 403
        return f(*args, **kwargs)

    return login_required(decorated_function)


def admin_logger():
    return ContextualLogger(__name__, {"admin": current_user.username})


def form_error(form):
    return jsonify({"error": "Invalid input", "fields": form.error_messages}), 400


@bp.route("/csrf-token")
def csrf_token():
    """Token for the X-CSRFToken header of state-changing requests"""
    return jsonify({"csrf_token": generate_csrf()})


# Matches


@bp.route("/matches")
@login_required
def matches():
    """Get all matches in kickoff order"""
    status = request.args.get("status")
    if status and status not in (SCHEDULED, FINISHED):
        return jsonify({"error": f"Unknown status: {status}"}), 400

    return jsonify([match.to_dict() for match in Match.get_all_ordered(status)])


@bp.route("/matches", methods=["POST"])
@admin_required
def create_match():
    """Schedule a new match"""
    form = MatchForm()
    if not form.validate():
        return form_error(form)

    match, message = Match.create_match(
        home_team=form.home_team.data,
        away_team=form.away_team.data,
        group=form.group.data,
        match_time=form.match_time.data,
        description=form.description.data or None,
    )
    if not match:
        return jsonify({"error": message}), 400

    db.session.commit()
    admin_logger().info(f"Created match {match.id}: {match.home_team} vs {match.away_team}")

    return jsonify({"match": match.to_dict(), "message": message}), 201


@bp.route("/matches/<int:match_id>")
@login_required
def match_detail(match_id):
    """Get match details"""
    match = db.get_or_404(Match, match_id)
    return jsonify(match.to_dict())


@bp.route("/matches/<int:match_id>", methods=["PUT"])
@admin_required
def update_match(match_id):
    """Edit teams, stage, kickoff or description of a match"""
    match = db.get_or_404(Match, match_id)

    form = MatchForm()
    if not form.validate():
        return form_error(form)

    updated, message = match.update_details(
        home_team=form.home_team.data,
        away_team=form.away_team.data,
        group=form.group.data,
        match_time=form.match_time.data,
        description=form.description.data or None,
    )
    if not updated:
        db.session.rollback()
        return jsonify({"error": message}), 400

    db.session.commit()
    admin_logger().info(f"Updated match {match.id}")

    return jsonify({"match": match.to_dict(), "message": message})


@bp.route("/matches/<int:match_id>/result", methods=["POST"])
@admin_required
def match_result(match_id):
    """Record the final score; standings are recomputed"""
    match = db.get_or_404(Match, match_id)

    form = ResultForm()
    if not form.validate():
        return form_error(form)

    updated, message = match.set_result(
        form.home_score.data,
        form.away_score.data,
        penalty_winner=form.penalty_winner.data or None,
    )
    if not updated:
        db.session.rollback()
        return jsonify({"error": message}), 400

    db.session.commit()
    admin_logger().info(
        f"Result for match {match.id}: {match.home_team} {match.home_score}-"
        f"{match.away_score} {match.away_team}"
        + (f" ({match.penalty_winner} on penalties)" if match.penalty_winner else "")
    )

    return jsonify({"match": match.to_dict(), "message": message})


@bp.route("/matches/<int:match_id>", methods=["DELETE"])
@admin_required
def delete_match(match_id):
    """Delete a match and every bet on it"""
    match = db.get_or_404(Match, match_id)

    match.remove()
    db.session.commit()
    admin_logger().info(f"Deleted match {match_id}")

    return jsonify({"success": True})


@bp.route("/matches/<int:match_id>/bets")
@admin_required
@add_security_headers
def match_bets(match_id):
    """Every user's bet on a match"""
    match = db.get_or_404(Match, match_id)

    return jsonify(
        [
            dict(
                bet.to_dict(include_score=True),
                user={"id": bet.user.id, "name": bet.user.name},
            )
            for bet in match.get_bets()
        ]
    )


# Bets


@bp.route("/bets")
@login_required
@add_security_headers
def user_bets():
    """Get the current user's bets with points earned so far"""
    bets = current_user.bets.order_by(Bet.match_id).all()
    return jsonify([bet.to_dict(include_score=True) for bet in bets])


@bp.route("/bets", methods=["POST"])
@login_required
def place_bet():
    """Create or replace the current user's bet on a match"""
    form = BetForm()
    if not form.validate():
        return form_error(form)

    bet, message = Bet.place_bet(
        user_id=current_user.id,
        match_id=form.match_id.data,
        home_score=form.home_score.data,
        away_score=form.away_score.data,
        penalty_winner=form.penalty_winner.data or None,
    )
    if not bet:
        status_code = 404 if message == "Match not found" else 400
        return jsonify({"error": message}), status_code

    try:
        db.session.commit()
    except IntegrityError:
        # Concurrent first submission for the same match
        db.session.rollback()
        return jsonify({"error": "Bet was changed concurrently, please retry"}), 409

    return jsonify({"bet": bet.to_dict(), "message": message})


# Standings


@cached_query("leaderboard", timeout="LEADERBOARD_CACHE_TIMEOUT")
def leaderboard_entries():
    return [
        {
            "rank": entry["rank"],
            "user": {
                "id": entry["user"].id,
                "name": entry["user"].name,
                "username": entry["user"].username,
            },
            "points": entry["points"],
        }
        for entry in User.get_leaderboard()
    ]


@bp.route("/leaderboard")
def leaderboard():
    """Ranked players, highest points first"""
    return jsonify({"leaderboard": leaderboard_entries()})


@bp.route("/standings/recalculate", methods=["POST"])
@admin_required
def recalculate():
    """Force a full recomputation of every user's points"""
    users = User.recalculate_standings()
    db.session.commit()
    admin_logger().info("Standings recalculated on demand")

    return jsonify({"users": [user.to_dict() for user in users]})


# Users


@bp.route("/users")
@admin_required
def users():
    """All accounts, admins included"""
    return jsonify([user.to_dict() for user in User.query.order_by(User.id).all()])


@bp.route("/users", methods=["POST"])
@admin_required
def create_user():
    """Create a player or admin account"""
    form = CreateUserForm()
    if not form.validate():
        return form_error(form)

    user, message = User.create_user(
        name=form.name.data,
        username=form.username.data,
        password=form.password.data,
        role=form.role.data,
    )
    if not user:
        return jsonify({"error": message}), 409

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({"error": "Username already exists"}), 409

    admin_logger().info(f"Created {user.role} account '{user.username}'")

    return jsonify({"user": user.to_dict(), "message": message}), 201


@bp.route("/users/<int:user_id>", methods=["DELETE"])
@admin_required
def delete_user(user_id):
    """Delete an account and its bets"""
    user = db.get_or_404(User, user_id)

    if user.id == current_user.id:
        return jsonify({"error": "You cannot delete your own account"}), 400

    username = user.username
    user.remove()
    db.session.commit()
    admin_logger().info(f"Deleted user '{username}'")

    return jsonify({"success": True})


@bp.route("/users/<int:user_id>/audit")
@admin_required
@add_security_headers
def user_audit(user_id):
    """Match-by-match points breakdown for one user"""
    user = db.get_or_404(User, user_id)
    return jsonify(user.get_audit())


@bp.route("/users/<int:user_id>/bets/<int:match_id>")
@login_required
def user_bet(user_id, match_id):
    """A single bet; users may only read their own"""
    if user_id != current_user.id and not current_user.is_admin:
        abort(403)

    bet = Bet.query.filter_by(user_id=user_id, match_id=match_id).first_or_404()
    return jsonify(bet.to_dict(include_score=True))
