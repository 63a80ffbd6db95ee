#!/usr/bin/env python3
"""
Weekly Picks Management CLI

This script provides command-line management functionality for the Weekly Picks application.
"""

import logging

import click
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from weekly_picks import create_app, db, get_schedule_provider
from weekly_picks.models import Game, Group, GroupCode, User
from weekly_picks.utils.data_sync import DataSync
from weekly_picks.utils.scoring import score_week

logger = logging.getLogger(__name__)

WEEK = click.IntRange(1, 18)


@click.group()
@click.option(
    "--config",
    "config_name",
    default=None,
    help="Configuration name (default: FLASK_CONFIG or 'default')",
)
@click.pass_context
def cli(ctx, config_name):
    """Weekly Picks Management CLI"""
    app = create_app(config_name)
    ctx.with_resource(app.app_context())


# Season Commands
@cli.group()
def season():
    """Season information commands"""
    pass


@season.command("current")
def season_current():
    """Show the current season and week"""
    provider = get_schedule_provider()
    click.echo(f"Season: {provider.get_current_season()}")
    click.echo(f"Week: {provider.get_current_week()}")


# Data Sync Commands
@cli.group()
def sync():
    """Schedule synchronization commands"""
    pass


@sync.command("week")
@click.argument("week", type=WEEK)
@click.option("--season", "season_year", type=int, help="Season year (default: current)")
def sync_week(week, season_year):
    """Store the games of a single week"""
    provider = get_schedule_provider()
    season_year = season_year or provider.get_current_season()

    try:
        games = DataSync(provider).sync_week(season_year, week)
        click.echo(f"✅ Week {week} of {season_year} has {len(games)} games stored")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database error syncing week {week}: {str(e)}")
        logger.error(f"Week sync failed - SQL error: {e}")


@sync.command("season")
@click.option("--season", "season_year", type=int, help="Season year (default: current)")
def sync_season(season_year):
    """Store every regular-season game"""
    provider = get_schedule_provider()
    season_year = season_year or provider.get_current_season()

    click.echo(f"Syncing games for {season_year} season...")
    try:
        inserted = DataSync(provider).sync_season(season_year)
        click.echo(f"✅ Inserted {inserted} new games for {season_year}")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database error syncing season: {str(e)}")
        logger.error(f"Season sync failed - SQL error: {e}")


@sync.command("scores")
@click.option("--week", type=WEEK, help="Week to update (default: current)")
def sync_scores(week):
    """Apply final scores from the schedule provider and score picks"""
    provider = get_schedule_provider()
    season_year = provider.get_current_season()
    week = week or provider.get_current_week()

    click.echo(f"Updating scores for week {week}...")
    try:
        fixtures = provider.update_game_scores(season_year, week)
        updated = DataSync(provider).apply_score_updates(fixtures)
        scored = score_week(week)
        click.echo(f"✅ Updated {updated} games, scored {scored} picks")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database error updating scores: {str(e)}")
        logger.error(f"Score sync failed - SQL error: {e}")


# Scoring Commands
@cli.group()
def score():
    """Scoring commands"""
    pass


@score.command("week")
@click.argument("week", type=WEEK)
def score_week_command(week):
    """Score the picks of every completed game in a week"""
    completed = Game.query.filter_by(week=week, is_completed=True).count()
    scored = score_week(week)
    click.echo(f"✅ Scored {scored} picks across {completed} completed games")


# Group Commands
@cli.group()
def group():
    """Group management commands"""
    pass


@group.command("create")
@click.argument("name")
@click.option("--description", help="Group description")
@click.option("--max-members", type=click.IntRange(min=1), help="Member limit")
def group_create(name, description, max_members):
    """Create a group"""
    new_group = Group(name=name, description=description, max_members=max_members)
    db.session.add(new_group)

    try:
        db.session.commit()
        click.echo(f"✅ Created group '{name}' (id={new_group.id})")
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error creating group: {str(e)}")
        logger.error(f"Group creation failed - SQL error: {e}")


@group.command("add-code")
@click.argument("group_id", type=int)
@click.argument("code")
@click.option("--max-usage", type=click.IntRange(min=1), help="Usage limit")
@click.option(
    "--expires",
    type=click.DateTime(formats=["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S"]),
    help="Expiry (UTC)",
)
def group_add_code(group_id, code, max_usage, expires):
    """Add an invite code to a group"""
    target = db.session.get(Group, group_id)
    if target is None:
        click.echo(f"❌ Group {group_id} not found!")
        return

    db.session.add(
        GroupCode(code=code, group_id=target.id, max_usage=max_usage, expires_at=expires)
    )
    try:
        db.session.commit()
        click.echo(f"✅ Added code '{code}' to group '{target.name}'")
    except IntegrityError:
        db.session.rollback()
        click.echo(f"❌ Code '{code}' already exists!")


# User Commands
@cli.group()
def user():
    """User management commands"""
    pass


@user.command("list")
@click.option("--group", "group_id", type=int, help="Only members of this group")
def user_list(group_id):
    """List users"""
    query = User.query.order_by(User.id)
    if group_id is not None:
        query = query.filter_by(group_id=group_id)
    users = query.all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("Users:")
    for u in users:
        status = "🟢" if u.is_active else "🔴"
        admin = " (admin)" if u.is_admin else ""
        click.echo(f"  {status} {u.username} ({u.email}) group={u.group_id}{admin}")


@user.command("promote")
@click.argument("username")
def user_promote(username):
    """Grant administrative access to a user"""
    target = User.query.filter_by(username=username).first()
    if target is None:
        click.echo(f"❌ User '{username}' not found!")
        return

    target.is_admin = True
    db.session.commit()
    click.echo(f"✅ {username} is now an admin")


# Database Commands
@cli.group("db-cmd")
def db_cmd():
    """Database commands"""
    pass


@db_cmd.command("init")
def init_db():
    """Initialize database tables"""
    try:
        db.create_all()
        click.echo("✅ Database tables created successfully!")
    except SQLAlchemyError as e:
        click.echo(f"❌ Error initializing database: {str(e)}")


@db_cmd.command("reset")
@click.confirmation_option(prompt="This will DELETE ALL DATA. Are you sure?")
def reset():
    """⚠️  DANGER: Drop and recreate all tables"""
    try:
        db.drop_all()
        db.create_all()
        click.echo("✅ Database reset successfully!")
    except SQLAlchemyError as e:
        click.echo(f"❌ Error resetting database: {str(e)}")


if __name__ == "__main__":
    cli()
