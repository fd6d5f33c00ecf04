"""CLI tools for teams administration."""

from uuid import UUID

import click

from recruit_api.db.session import SessionLocal
from recruit_api.schemas.team import TeamCreate
from recruit_api.services import team_service, user_service
from recruit_api.services.errors import TeamsServiceError


@click.group()
def cli():
    """Recruit teams CLI tools."""
    pass


@cli.command()
@click.option("--name", required=True, help="Full name")
@click.option("--email", required=True, help="Email address (unique)")
@click.option("--phone", default=None, help="Optional phone number")
def create_user(name: str, email: str, phone: str | None):
    """
    Create a user for local bootstrap.

    Example:
        python -m recruit_api.cli create-user --name "Asha Rao" --email "asha@example.com"
    """
    db = SessionLocal()
    try:
        if user_service.get_user_by_email(db, email):
            click.echo(f"❌ User already exists: {email}")
            raise SystemExit(1)

        user = user_service.create_user(db, name=name, email=email, phone=phone)
        db.commit()

        click.echo(f"✓ Created user: {user.name}")
        click.echo(f"  ID: {user.id}")
    finally:
        db.close()


@cli.command()
@click.option("--name", required=True, help="Team name (unique)")
@click.option("--lead-email", default=None, help="Email of the team lead")
@click.option("--member-email", "member_emails", multiple=True, help="Email of a member (repeatable)")
def create_team(name: str, lead_email: str | None, member_emails: tuple[str, ...]):
    """
    Create a team, optionally with a lead and initial members.

    Example:
        python -m recruit_api.cli create-team --name "Alpha" --lead-email "asha@example.com" \\
            --member-email "ravi@example.com"
    """
    from recruit_api.services import team_membership_service

    db = SessionLocal()
    try:
        lead_id = None
        if lead_email:
            lead = user_service.get_user_by_email(db, lead_email)
            if not lead:
                click.echo(f"❌ User not found: {lead_email}")
                raise SystemExit(1)
            lead_id = lead.id

        team = team_service.create_team(
            db, TeamCreate(name=name, lead_id=lead_id), actor_id=lead_id
        )
        for email in member_emails:
            member = user_service.get_user_by_email(db, email)
            if not member:
                click.echo(f"❌ User not found: {email}")
                raise SystemExit(1)
            team_membership_service.assign_user(db, team.id, member.id, actor_id=lead_id)
        db.commit()

        click.echo(f"✓ Created team: {team.name}")
        click.echo(f"  ID: {team.id}")
        if member_emails:
            click.echo(f"  Members: {len(member_emails)}")
    except TeamsServiceError as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
        raise SystemExit(1)
    finally:
        db.close()


@cli.command()
@click.option("--team-id", default=None, help="Show one team's summary instead of global stats")
def team_stats(team_id: str | None):
    """Print team statistics (global, or for a single team)."""
    db = SessionLocal()
    try:
        if team_id:
            summary = team_service.get_team_summary(db, UUID(team_id))
            data = summary.model_dump()
        else:
            data = team_service.get_team_stats(db).model_dump()
        for key, value in data.items():
            click.echo(f"{key}: {value}")
    except TeamsServiceError as e:
        click.echo(f"❌ Error: {e}")
        raise SystemExit(1)
    finally:
        db.close()


@cli.command()
@click.option("--email", required=True, help="User to mint a session token for")
def mint_token(email: str):
    """
    Print a session token for a user (dev only).

    Use it as the recruit_session cookie when calling the API locally.
    """
    from recruit_api.core.config import settings
    from recruit_api.core.security import create_session_token

    if settings.ENV != "dev":
        click.echo("❌ mint-token is only available when ENV=dev")
        raise SystemExit(1)

    db = SessionLocal()
    try:
        user = user_service.get_user_by_email(db, email)
        if not user:
            click.echo(f"❌ User not found: {email}")
            raise SystemExit(1)
        click.echo(create_session_token(user.id, user.token_version))
    finally:
        db.close()


if __name__ == "__main__":
    cli()
