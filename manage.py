#!/usr/bin/env python3
"""
CopaBet Management CLI

This script provides command-line management functionality for the CopaBet application.
"""

import logging
import secrets

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from copabet import create_app, db
from copabet.models import ROLE_ADMIN, Match, User
from copabet.utils.scoring import FINISHED

logger = logging.getLogger(__name__)


@click.group()
def cli():
    """CopaBet Management CLI"""
    pass


def bootstrap_admin():
    """Create the default admin on an empty user table"""
    if User.query.first():
        return None, None

    password = current_app.config.get("DEFAULT_ADMIN_PASSWORD")
    generated = not password
    if generated:
        password = secrets.token_urlsafe(12)

    admin, _ = User.create_user(
        name=current_app.config.get("DEFAULT_ADMIN_NAME", "Administrator"),
        username=current_app.config.get("DEFAULT_ADMIN_USERNAME", "admin"),
        password=password,
        role=ROLE_ADMIN,
    )
    return admin, password if generated else None


# Database Commands
@cli.group("db-cmd")
def db_cmd():
    """Database commands"""
    pass


@db_cmd.command()
@with_appcontext
def init():
    """Initialize database tables and the default admin"""
    try:
        db.create_all()
        admin, generated_password = bootstrap_admin()
        db.session.commit()
        click.echo("✅ Database tables created successfully!")
        if admin:
            click.echo(f"✅ Created admin user '{admin.username}'")
        if generated_password:
            click.echo(f"🔐 Generated admin password: {generated_password}")
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Error initializing database: {str(e)}")
        logger.error(f"Database initialization failed - SQL error: {e}")


@db_cmd.command()
@with_appcontext
def reset():
    """⚠️  DANGER: Drop and recreate all tables"""
    if not click.confirm("This will DELETE ALL DATA. Are you sure?"):
        click.echo("Cancelled.")
        return

    try:
        db.drop_all()
        db.create_all()
        click.echo("✅ Database reset successfully!")
    except SQLAlchemyError as e:
        click.echo(f"❌ Error resetting database: {str(e)}")
        logger.error(f"Database reset failed - SQL error: {e}")


# User Management Commands
@cli.group()
def user():
    """User management commands"""
    pass


@user.command()
@click.argument("username")
@click.argument("password")
@click.option("--name", default="Administrator", help="Display name")
@with_appcontext
def create_admin(username, password, name):
    """Create an admin user"""
    try:
        admin, message = User.create_user(
            name=name, username=username, password=password, role=ROLE_ADMIN
        )
        if not admin:
            click.echo(f"❌ {message}")
            return

        db.session.commit()
        click.echo(f"✅ Created admin user '{username}'")

    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Error creating user: {str(e)}")
        logger.error(f"Admin creation failed - SQL error: {e}")


@user.command()
@with_appcontext
def list_users():
    """List all users"""
    users = User.query.order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("Users:")
    for u in users:
        role = "👑" if u.is_admin else "  "
        click.echo(f"  {role} {u.username} - {u.name} ({u.points} pts)")


# Match Commands
@cli.group()
def match():
    """Match management commands"""
    pass


@match.command()
@with_appcontext
def list_matches():
    """List all matches in kickoff order"""
    matches = Match.get_all_ordered()

    if not matches:
        click.echo("No matches found.")
        return

    for m in matches:
        if m.is_finished:
            score = f"{m.home_score}-{m.away_score}"
            if m.penalty_winner:
                score += f" ({m.penalty_winner} on penalties)"
        else:
            score = "vs"
        click.echo(
            f"  [{m.id}] {m.match_time:%Y-%m-%d %H:%M} {m.group}: "
            f"{m.home_team} {score} {m.away_team}"
        )


@match.command()
@click.argument("match_id", type=int)
@click.argument("home_score", type=click.IntRange(min=0))
@click.argument("away_score", type=click.IntRange(min=0))
@click.option("--penalty-winner", help="Team that advanced on penalties")
@with_appcontext
def result(match_id, home_score, away_score, penalty_winner):
    """Record the final score of a match"""
    try:
        m = db.session.get(Match, match_id)
        if not m:
            click.echo(f"❌ Match {match_id} not found!")
            return

        updated, message = m.set_result(home_score, away_score, penalty_winner)
        if not updated:
            db.session.rollback()
            click.echo(f"❌ {message}")
            return

        db.session.commit()
        click.echo(f"✅ {message}")

    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error saving result: {str(e)}")
        logger.error(f"Result entry failed - SQL error: {e}")


# Standings Commands
@cli.group()
def standings():
    """Standings commands"""
    pass


@standings.command()
@with_appcontext
def recalculate():
    """Recompute every user's points from all bets"""
    try:
        users = User.recalculate_standings()
        db.session.commit()
        click.echo(f"✅ Recalculated points for {len(users)} users")
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error recalculating standings: {str(e)}")
        logger.error(f"Standings recalculation failed - SQL error: {e}")


@standings.command()
@with_appcontext
def show():
    """Print the leaderboard"""
    leaderboard = User.get_leaderboard()

    if not leaderboard:
        click.echo("No players registered.")
        return

    for entry in leaderboard:
        click.echo(
            f"  #{entry['rank']:<3} {entry['user'].name:<30} {entry['points']:>4} pts"
        )


@cli.command()
@with_appcontext
def status():
    """Show application status"""
    click.echo("⚽ CopaBet Application Status")
    click.echo("=" * 40)

    try:
        db.session.execute(text("SELECT 1"))
        click.echo("✅ Database: Connected")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database: Error - {str(e)}")
        return

    user_count = User.query.count()
    click.echo(f"👥 Users: {user_count}")

    match_count = Match.query.count()
    finished_count = Match.query.filter_by(status=FINISHED).count()
    click.echo(f"⚽ Matches: {finished_count}/{match_count} finished")


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        cli()
