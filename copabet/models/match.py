from datetime import datetime, timedelta, timezone

from flask import current_app

from copabet import db
from copabet.utils.scoring import FINISHED, SCHEDULED, is_knockout_stage


def _as_utc(value):
    """Treat timezone-naive datetimes as UTC"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Match(db.Model):
    __tablename__ = "matches"

    id = db.Column(db.Integer, primary_key=True)

    # Teams (plain names, penalty_winner refers to one of them)
    home_team = db.Column(db.String(100), nullable=False)
    away_team = db.Column(db.String(100), nullable=False)

    # Stage label, e.g. "Group A" or "Quarter-Final"
    group = db.Column(db.String(50), nullable=False)
    match_time = db.Column(db.DateTime, nullable=False)
    description = db.Column(db.Text)

    # Result
    status = db.Column(db.String(20), nullable=False, default=SCHEDULED)
    home_score = db.Column(db.Integer)
    away_score = db.Column(db.Integer)
    penalty_winner = db.Column(db.String(100))

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    bets = db.relationship(
        "Bet", backref="match", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.Index("idx_match_time", "match_time"),
        db.Index("idx_match_status", "status"),
        db.CheckConstraint("home_team != away_team", name="different_teams"),
    )

    def __repr__(self):
        return f"<Match {self.home_team} vs {self.away_team} ({self.group})>"

    @property
    def is_finished(self):
        return self.status == FINISHED

    @property
    def is_knockout(self):
        return is_knockout_stage(self.group)

    @property
    def teams(self):
        return (self.home_team, self.away_team)

    def has_started(self):
        """Check if kickoff time has passed"""
        if not self.match_time:
            return False
        return datetime.now(timezone.utc) >= _as_utc(self.match_time)

    def is_open_for_bets(self, lock_minutes=None):
        """Bets close lock_minutes before kickoff and never reopen once finished"""
        if self.is_finished:
            return False
        if lock_minutes is None:
            lock_minutes = current_app.config.get("BET_LOCK_MINUTES", 60)
        closes_at = _as_utc(self.match_time) - timedelta(minutes=lock_minutes)
        return datetime.now(timezone.utc) < closes_at

    @staticmethod
    def create_match(home_team, away_team, group, match_time, description=None):
        """Create a scheduled match"""
        if home_team == away_team:
            return None, "Home and away teams must be different"

        match = Match(
            home_team=home_team,
            away_team=away_team,
            group=group,
            match_time=match_time,
            description=description,
            status=SCHEDULED,
        )
        db.session.add(match)
        return match, "Match created successfully"

    def update_details(self, home_team, away_team, group, match_time, description=None):
        """Edit the fixture; status and scores are kept as they are"""
        if home_team == away_team:
            return None, "Home and away teams must be different"

        if self.penalty_winner and self.penalty_winner not in (home_team, away_team):
            # A renamed team would orphan the recorded decider
            self.penalty_winner = None

        self.home_team = home_team
        self.away_team = away_team
        self.group = group
        self.match_time = match_time
        self.description = description

        if self.is_finished:
            # Renaming a team or changing the stage can change every score
            from .user import User

            db.session.flush()
            User.recalculate_standings()

        return self, "Match updated successfully"

    def set_result(self, home_score, away_score, penalty_winner=None):
        """Record the final score, finish the match and recompute standings"""
        if home_score is None or away_score is None:
            return None, "Both scores are required"
        if home_score < 0 or away_score < 0:
            return None, "Scores cannot be negative"

        if self.is_knockout and home_score == away_score:
            if not penalty_winner:
                return None, "Select who won on penalties"
            if penalty_winner not in self.teams:
                return (
                    None,
                    f"Penalty winner must be {self.home_team} or {self.away_team}",
                )
        else:
            penalty_winner = None

        self.home_score = home_score
        self.away_score = away_score
        self.penalty_winner = penalty_winner
        self.status = FINISHED

        from .user import User

        db.session.flush()
        User.recalculate_standings()

        return self, "Result saved successfully"

    def remove(self):
        """Delete this match with its bets and recompute standings"""
        from .user import User

        db.session.delete(self)
        db.session.flush()
        User.recalculate_standings()

    def get_bets(self):
        """All bets on this match in submission order"""
        from .bet import Bet

        return self.bets.order_by(Bet.timestamp).all()

    @staticmethod
    def get_all_ordered(status=None):
        """Get matches in kickoff order, optionally filtered by status"""
        query = Match.query
        if status:
            query = query.filter_by(status=status)
        return query.order_by(Match.match_time, Match.id).all()

    def to_dict(self):
        """Convert match to dictionary for API responses"""
        return {
            "id": self.id,
            "home_team": self.home_team,
            "away_team": self.away_team,
            "group": self.group,
            "is_knockout": self.is_knockout,
            "match_time": self.match_time.isoformat() if self.match_time else None,
            "description": self.description,
            "status": self.status,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "penalty_winner": self.penalty_winner,
            "is_open_for_bets": self.is_open_for_bets(),
        }
