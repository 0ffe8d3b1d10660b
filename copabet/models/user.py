from datetime import datetime, timezone

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from copabet import db
from copabet.utils.cache_utils import invalidate_on_commit
from copabet.utils.logging_config import get_logger
from copabet.utils.performance import timer
from copabet.utils.scoring import FINISHED, SCHEDULED
from copabet.utils.standings import build_leaderboard, recalculate_standings

ROLE_ADMIN = "ADMIN"
ROLE_USER = "USER"

logger = get_logger(__name__)


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(10), nullable=False, default=ROLE_USER)

    # Derived from bets on finished matches, see recalculate_standings()
    points = db.Column(db.Integer, nullable=False, default=0)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    last_login = db.Column(db.DateTime)

    # Relationships
    bets = db.relationship(
        "Bet", backref="user", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (db.Index("idx_user_role", "role"),)

    def __repr__(self):
        return f"<User {self.username}>"

    @property
    def is_admin(self):
        return self.role == ROLE_ADMIN

    def set_password(self, password):
        """Set password hash"""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Check password against hash"""
        return check_password_hash(self.password_hash, password)

    def update_last_login(self):
        """Update last login timestamp"""
        self.last_login = datetime.now(timezone.utc)
        db.session.commit()

    @staticmethod
    def create_user(name, username, password, role=ROLE_USER):
        """Create a user; usernames are unique across the league"""
        if role not in (ROLE_ADMIN, ROLE_USER):
            return None, f"Unknown role: {role}"

        if User.query.filter_by(username=username).first():
            return None, "Username already exists"

        user = User(name=name, username=username, role=role, points=0)
        user.set_password(password)
        db.session.add(user)
        invalidate_on_commit("leaderboard")
        return user, "User created successfully"

    def remove(self):
        """Delete this user with their bets and recompute standings"""
        db.session.delete(self)
        db.session.flush()
        User.recalculate_standings()

    def get_bet_for_match(self, match_id):
        """Get this user's bet for a specific match"""
        return self.bets.filter_by(match_id=match_id).first()

    def get_audit(self):
        """
        Point-by-point breakdown for admins

        Returns:
            dict with "history" (every finished match, newest first, with the
            points earned) and "upcoming" (scheduled matches this user has
            already bet on)
        """
        from .match import Match

        bets_by_match = {bet.match_id: bet for bet in self.bets.all()}

        history = []
        for match in reversed(Match.get_all_ordered(status=FINISHED)):
            bet = bets_by_match.get(match.id)
            if bet:
                result = bet.score
                points, reasons = result.points, result.reasons
            else:
                points, reasons = 0, ["No bet"]
            history.append(
                {
                    "match": match.to_dict(),
                    "bet": bet.to_dict() if bet else None,
                    "points": points,
                    "reasons": reasons,
                }
            )

        upcoming = [
            {"match": match.to_dict(), "bet": bets_by_match[match.id].to_dict()}
            for match in Match.get_all_ordered(status=SCHEDULED)
            if match.id in bets_by_match
        ]

        return {
            "user": self.to_dict(),
            "total_points": sum(entry["points"] for entry in history),
            "history": history,
            "upcoming": upcoming,
        }

    @staticmethod
    @timer
    def recalculate_standings():
        """
        Recompute every user's points from all matches and bets

        Runs inside the caller's transaction; the caller commits.
        """
        from .bet import Bet
        from .match import Match

        users = User.query.order_by(User.id).all()
        recalculate_standings(Match.query.all(), Bet.query.all(), users)
        invalidate_on_commit("leaderboard")

        logger.info(f"Standings recalculated for {len(users)} users")
        return users

    @staticmethod
    def get_leaderboard():
        """Ranked players (admins do not compete), ties in listing order"""
        players = User.query.filter_by(role=ROLE_USER).order_by(User.id).all()
        return build_leaderboard(players)

    def to_dict(self):
        """Convert user to dictionary for API responses"""
        return {
            "id": self.id,
            "name": self.name,
            "username": self.username,
            "role": self.role,
            "points": self.points,
        }
