import pytest
from click.testing import CliRunner

from copabet import db
from copabet.models import Bet, User
from manage import cli
from tests.conftest import make_match, make_user


@pytest.fixture
def runner():
    return CliRunner()


def test_init_bootstraps_admin_with_configured_password(app, ctx, runner):
    app.config["DEFAULT_ADMIN_PASSWORD"] = "letmein"

    result = runner.invoke(cli, ["db-cmd", "init"])

    assert result.exit_code == 0, result.output
    assert "Created admin user 'admin'" in result.output
    assert "Generated admin password" not in result.output
    admin = User.query.filter_by(username="admin").one()
    assert admin.is_admin
    assert admin.check_password("letmein")


def test_init_generates_admin_password(app, ctx, runner):
    app.config["DEFAULT_ADMIN_PASSWORD"] = None

    result = runner.invoke(cli, ["db-cmd", "init"])

    assert result.exit_code == 0, result.output
    assert "Generated admin password" in result.output
    password = result.output.rsplit(": ", 1)[1].strip()
    assert User.query.filter_by(username="admin").one().check_password(password)


def test_init_leaves_existing_users_alone(ctx, runner):
    make_user("alice")

    result = runner.invoke(cli, ["db-cmd", "init"])

    assert result.exit_code == 0, result.output
    assert "Database tables created successfully!" in result.output
    assert "Created admin user" not in result.output
    assert User.query.count() == 1


def test_database_group_is_named_db_cmd():
    assert "db-cmd" in cli.commands
    assert set(cli.commands["db-cmd"].commands) == {"init", "reset"}


def test_create_admin(ctx, runner):
    result = runner.invoke(
        cli, ["user", "create-admin", "boss", "hunter22", "--name", "The Boss"]
    )
    assert "Created admin user 'boss'" in result.output
    assert User.query.filter_by(username="boss").one().name == "The Boss"

    result = runner.invoke(cli, ["user", "create-admin", "boss", "other"])
    assert "Username already exists" in result.output


def test_list_users(ctx, runner):
    make_user("alice")
    result = runner.invoke(cli, ["user", "list-users"])
    assert "alice - Alice (0 pts)" in result.output


def test_result_command_scores_bets(ctx, runner):
    alice = make_user("alice")
    match = make_match("Brazil", "Argentina", group="Final")
    Bet.place_bet(alice.id, match.id, 0, 0, "Argentina")
    db.session.commit()

    result = runner.invoke(cli, ["match", "result", str(match.id), "0", "0"])
    assert "Select who won on penalties" in result.output

    result = runner.invoke(
        cli,
        ["match", "result", str(match.id), "0", "0", "--penalty-winner", "Argentina"],
    )
    assert "Result saved successfully" in result.output
    assert alice.points == 10


def test_result_command_unknown_match(ctx, runner):
    result = runner.invoke(cli, ["match", "result", "41", "1", "0"])
    assert "Match 41 not found!" in result.output


def test_result_command_rejects_negative_scores(ctx, runner):
    match = make_match("Brazil", "Argentina")
    result = runner.invoke(cli, ["match", "result", str(match.id), "-1", "0"])
    assert result.exit_code != 0


def test_list_matches(ctx, runner):
    match = make_match("Brazil", "Argentina", group="Semi-Final")
    match.set_result(2, 2, "Brazil")
    db.session.commit()

    result = runner.invoke(cli, ["match", "list-matches"])
    assert "Semi-Final: Brazil 2-2 (Brazil on penalties) Argentina" in result.output


def test_standings_recalculate_and_show(ctx, runner):
    alice = make_user("alice")
    bob = make_user("bob")
    match = make_match("Brazil", "Argentina")
    Bet.place_bet(bob.id, match.id, 1, 0)
    db.session.commit()
    match.set_result(1, 0)
    alice.points = 99
    db.session.commit()

    result = runner.invoke(cli, ["standings", "recalculate"])
    assert "Recalculated points for 2 users" in result.output
    assert alice.points == 0

    lines = runner.invoke(cli, ["standings", "show"]).output.splitlines()
    assert "Bob" in lines[0] and "10 pts" in lines[0]
    assert "Alice" in lines[1] and "0 pts" in lines[1]


def test_status(ctx, runner):
    make_match("Brazil", "Argentina")
    result = runner.invoke(cli, ["status"])
    assert "Database: Connected" in result.output
    assert "Matches: 0/1 finished" in result.output
