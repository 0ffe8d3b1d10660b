from datetime import datetime, timezone

from copabet import db
from copabet.utils.scoring import ScoreResult, calculate_bet_points


class Bet(db.Model):
    __tablename__ = "bets"

    id = db.Column(db.Integer, primary_key=True)

    # Bet identification, one bet per user per match
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    match_id = db.Column(db.Integer, db.ForeignKey("matches.id"), nullable=False)

    # Predicted score
    home_score = db.Column(db.Integer, nullable=False)
    away_score = db.Column(db.Integer, nullable=False)
    penalty_winner = db.Column(db.String(100))

    # Submission time, informational only
    timestamp = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.UniqueConstraint("user_id", "match_id", name="unique_user_match_bet"),
        db.Index("idx_bet_user", "user_id"),
        db.Index("idx_bet_match", "match_id"),
    )

    def __repr__(self):
        return f"<Bet user_id={self.user_id} match_id={self.match_id} {self.home_score}-{self.away_score}>"

    @property
    def score(self):
        """Points and reasons earned so far"""
        if not self.match:
            return ScoreResult(0, [])
        return calculate_bet_points(self, self.match)

    @staticmethod
    def place_bet(user_id, match_id, home_score, away_score, penalty_winner=None):
        """Create or replace a user's bet on a match"""
        from .match import Match

        match = db.session.get(Match, match_id)
        if not match:
            return None, "Match not found"

        if match.is_finished:
            return None, "Match is already finished"

        if not match.is_open_for_bets():
            return None, "Betting is closed for this match"

        if home_score < 0 or away_score < 0:
            return None, "Scores cannot be negative"

        if match.is_knockout and home_score == away_score:
            if not penalty_winner:
                return None, "Select who advances on penalties"
            if penalty_winner not in match.teams:
                return (
                    None,
                    f"Penalty winner must be {match.home_team} or {match.away_team}",
                )
        else:
            penalty_winner = None

        bet = Bet.query.filter_by(user_id=user_id, match_id=match_id).first()
        message = "Bet updated successfully"
        if bet is None:
            bet = Bet(user_id=user_id, match_id=match_id)
            db.session.add(bet)
            message = "Bet placed successfully"

        bet.home_score = home_score
        bet.away_score = away_score
        bet.penalty_winner = penalty_winner
        bet.timestamp = datetime.now(timezone.utc)

        return bet, message

    def to_dict(self, include_score=False):
        """Convert bet to dictionary for API responses"""
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "match_id": self.match_id,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "penalty_winner": self.penalty_winner,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }

        if include_score:
            result = self.score
            data["points"] = result.points
            data["reasons"] = result.reasons

        return data
