#!/usr/bin/env python3
"""
Survivor Pool Management CLI

This script provides command-line management functionality for the survivor pool.
"""

import json
import logging

import click
from flask.cli import with_appcontext
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from survivor import create_app, db
from survivor.errors import PoolError
from survivor.models import Matchweek, Team, User
from survivor.models.user import ROLE_SUPERADMIN
from survivor.services.admin_service import AdminService
from survivor.services.leaderboard_service import LeaderboardService
from survivor.services.resolution_service import ResolutionService
from survivor.utils.cache_utils import invalidate_teams_cache
from survivor.utils.clock import get_clock

logger = logging.getLogger(__name__)


@click.group()
def cli():
    """Survivor Pool Management CLI"""
    pass


# Matchweek Management Commands
@cli.group()
def matchweek():
    """Matchweek management commands"""
    pass


@matchweek.command("create")
@click.argument("week_number", type=int)
@click.option("--name", help="Display name, defaults to 'Matchweek N'")
@click.option(
    "--start-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Matchweek start date (YYYY-MM-DD)",
)
@click.option(
    "--end-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Matchweek end date (YYYY-MM-DD)",
)
@click.option("--activate", is_flag=True, help="Activate this matchweek")
@with_appcontext
def create_matchweek(week_number, name, start_date, end_date, activate):
    """Create a new matchweek"""
    service = AdminService(get_clock())
    try:
        mw = service.create_matchweek(
            week_number,
            name,
            start_date.date() if start_date else None,
            end_date.date() if end_date else None,
        )
        click.echo(f"Created matchweek {week_number}")

        if activate:
            service.set_matchweek_active(mw.id, True)
            click.echo(f"Activated matchweek {week_number}")
    except PoolError as e:
        click.echo(f"Error: {e.message}")
        logger.error(f"Matchweek creation failed: {e.message}")


def _set_active(week_number, is_active):
    mw = Matchweek.get_by_week_number(week_number)
    if mw is None:
        click.echo(f"Matchweek {week_number} not found!")
        return

    try:
        AdminService(get_clock()).set_matchweek_active(mw.id, is_active)
    except PoolError as e:
        click.echo(f"Error: {e.message}")
        logger.error(f"Matchweek update failed: {e.message}")
        return

    state = "Activated" if is_active else "Deactivated"
    click.echo(f"{state} matchweek {week_number}")


@matchweek.command("activate")
@click.argument("week_number", type=int)
@with_appcontext
def activate_matchweek(week_number):
    """Activate a matchweek (all others are closed)"""
    _set_active(week_number, True)


@matchweek.command("deactivate")
@click.argument("week_number", type=int)
@with_appcontext
def deactivate_matchweek(week_number):
    """Close a matchweek"""
    _set_active(week_number, False)


@matchweek.command("list")
@with_appcontext
def list_matchweeks():
    """List all matchweeks"""
    matchweeks = AdminService(get_clock()).list_matchweeks()

    if not matchweeks:
        click.echo("No matchweeks found.")
        return

    click.echo("Matchweeks:")
    for mw in matchweeks:
        status = "ACTIVE" if mw.is_active else "closed"
        click.echo(f"  {mw.week_number}: {mw.name} - {status}")


# Team Commands
@cli.group()
def team():
    """Team reference data commands"""
    pass


@team.command("add")
@click.argument("name")
@click.argument("short_name")
@click.option("--stadium", help="Home venue")
@click.option("--logo-url", help="Crest image URL")
@with_appcontext
def add_team(name, short_name, stadium, logo_url):
    """Add a single team"""
    if Team.query.filter_by(name=name).first():
        click.echo(f"Team '{name}' already exists!")
        return

    try:
        db.session.add(
            Team(
                name=name,
                short_name=short_name.upper(),
                stadium=stadium,
                logo_url=logo_url,
            )
        )
        db.session.commit()
        invalidate_teams_cache()
        click.echo(f"Added team {name} ({short_name.upper()})")
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"Database error adding team: {str(e)}")
        logger.error(f"Team creation failed - SQL error: {e}")


@team.command("seed")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@with_appcontext
def seed_teams(path):
    """Load teams from a JSON list of {name, short_name, stadium, logo_url}"""
    with open(path, encoding="utf-8") as fh:
        entries = json.load(fh)

    existing = {t.name for t in Team.query.all()}
    added = 0
    try:
        for entry in entries:
            if entry["name"] in existing:
                continue
            db.session.add(
                Team(
                    name=entry["name"],
                    short_name=entry["short_name"].upper(),
                    stadium=entry.get("stadium"),
                    logo_url=entry.get("logo_url"),
                )
            )
            existing.add(entry["name"])
            added += 1
        db.session.commit()
    except (KeyError, SQLAlchemyError) as e:
        db.session.rollback()
        click.echo(f"Error seeding teams: {str(e)}")
        logger.error(f"Team seeding failed: {e}")
        return

    invalidate_teams_cache()
    click.echo(f"Seeded {added} teams ({len(entries) - added} already present)")


# Match Commands
@cli.group()
def match():
    """Match result commands"""
    pass


@match.command("finalize")
@click.argument("match_id", type=int)
@click.argument("home_score", type=click.IntRange(min=0))
@click.argument("away_score", type=click.IntRange(min=0))
@with_appcontext
def finalize_match(match_id, home_score, away_score):
    """Enter a final score and resolve the picks on that match"""
    try:
        result = ResolutionService(get_clock()).finalize_match(
            match_id, home_score, away_score
        )
    except PoolError as e:
        click.echo(f"Error: {e.message}")
        logger.error(f"Finalizing match {match_id} failed: {e.message}")
        return

    click.echo(
        f"Match {match_id} finalized {home_score}-{away_score}: "
        f"{result.processed_count} picks processed, {result.eliminated_count} eliminated"
    )


# User Commands
@cli.group()
def user():
    """User management commands"""
    pass


@user.command("create-admin")
@click.argument("email")
@click.argument("password")
@click.option("--name", default="Administrator", help="Display name")
@with_appcontext
def create_admin(email, password, name):
    """Create an administrator account"""
    email = email.strip().lower()
    if User.get_by_email(email):
        click.echo(f"User with email '{email}' already exists!")
        return

    try:
        admin = User(email=email, name=name, role=ROLE_SUPERADMIN, is_active=True)
        admin.set_password(password)
        db.session.add(admin)
        db.session.commit()
        click.echo(f"Created admin user {email}")
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"Error creating user: {str(e)}")
        logger.error(f"Admin creation failed - SQL error: {e}")


@user.command("list")
@with_appcontext
def list_users():
    """List all users"""
    users = User.query.order_by(User.name.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("Users:")
    for u in users:
        status = "active" if u.is_active else "disabled"
        state = "eliminated" if u.is_eliminated else "alive"
        click.echo(f"  {u.email} ({u.name}) - {u.role}, {status}, {state}")


@cli.command()
@with_appcontext
def leaderboard():
    """Print the current standings"""
    standings = LeaderboardService().compute_ranking()
    if not standings:
        click.echo("No participants yet.")
        return

    for position, s in enumerate(standings, start=1):
        state = "OUT" if s.is_eliminated else "IN "
        click.echo(
            f"{position:>3}. [{state}] {s.name} - week {s.last_week_survived}, "
            f"{s.points} pts, {s.correct_selections}/{s.total_selections} correct"
        )


# Database Commands
@cli.group()
def db_cmd():
    """Database commands"""
    pass


@db_cmd.command("init")
@with_appcontext
def init_db():
    """Initialize database tables"""
    try:
        db.create_all()
        click.echo("Database tables created successfully!")
    except SQLAlchemyError as e:
        click.echo(f"Error initializing database: {str(e)}")


@db_cmd.command()
@with_appcontext
def reset():
    """DANGER: Drop and recreate all tables"""
    if not click.confirm("This will DELETE ALL DATA. Are you sure?"):
        click.echo("Cancelled.")
        return

    try:
        db.drop_all()
        db.create_all()
        click.echo("Database reset successfully!")
    except SQLAlchemyError as e:
        click.echo(f"Error resetting database: {str(e)}")


@cli.command()
@with_appcontext
def status():
    """Show application status"""
    click.echo("Survivor Pool Status")
    click.echo("=" * 40)

    try:
        db.session.execute(text("SELECT 1"))
        click.echo("Database: Connected")
    except SQLAlchemyError as e:
        click.echo(f"Database: Error - {str(e)}")
        return

    current = Matchweek.get_current()
    if current:
        click.echo(f"Current Matchweek: {current.week_number} ({current.name})")
    else:
        click.echo("Current Matchweek: None active")

    participants = User.query.filter_by(role="user").count()
    alive = User.query.filter_by(role="user", is_eliminated=False).count()
    click.echo(f"Participants: {alive}/{participants} still alive")
    click.echo(f"Teams: {Team.query.count()}")
    click.echo(f"Today: {get_clock().now().date().isoformat()}")


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        cli()
