from wtforms import DateTimeField, IntegerField, StringField, TextAreaField
from wtforms.validators import (
    DataRequired,
    InputRequired,
    Length,
    NumberRange,
    Optional,
    ValidationError,
)

from copabet.forms.base import JSONForm

MATCH_TIME_FORMATS = ["%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M"]


def strip_whitespace(text):
    return text.strip() if text else text


class MatchForm(JSONForm):
    home_team = StringField(
        "Home Team",
        validators=[DataRequired(), Length(max=100)],
        filters=[strip_whitespace],
    )
    away_team = StringField(
        "Away Team",
        validators=[DataRequired(), Length(max=100)],
        filters=[strip_whitespace],
    )
    group = StringField(
        "Group / Stage",
        validators=[DataRequired(), Length(max=50)],
        filters=[strip_whitespace],
    )
    match_time = DateTimeField(
        "Kickoff (UTC)", format=MATCH_TIME_FORMATS, validators=[DataRequired()]
    )
    description = TextAreaField("Description", validators=[Optional()])

    def validate_away_team(self, away_team):
        if away_team.data and away_team.data == self.home_team.data:
            raise ValidationError("Home and away teams must be different")


class ResultForm(JSONForm):
    home_score = IntegerField(
        "Home Score", validators=[InputRequired(), NumberRange(min=0)]
    )
    away_score = IntegerField(
        "Away Score", validators=[InputRequired(), NumberRange(min=0)]
    )
    penalty_winner = StringField(
        "Penalty Winner", validators=[Optional()], filters=[strip_whitespace]
    )


class BetForm(JSONForm):
    match_id = IntegerField("Match", validators=[InputRequired()])
    home_score = IntegerField(
        "Home Score", validators=[InputRequired(), NumberRange(min=0)]
    )
    away_score = IntegerField(
        "Away Score", validators=[InputRequired(), NumberRange(min=0)]
    )
    penalty_winner = StringField(
        "Penalty Winner", validators=[Optional()], filters=[strip_whitespace]
    )
