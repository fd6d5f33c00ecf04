import pytest
from click.testing import CliRunner

from recruit_api import cli as cli_module
from recruit_api.core.security import decode_session_token
from recruit_api.db.models import Team, User


@pytest.fixture
def runner(db, monkeypatch) -> CliRunner:
    """CLI runner whose commands share the test session."""
    monkeypatch.setattr(cli_module, "SessionLocal", lambda: db)
    return CliRunner()


def test_create_user(runner, db):
    result = runner.invoke(
        cli_module.cli, ["create-user", "--name", "Asha Rao", "--email", "Asha@Example.com"]
    )

    assert result.exit_code == 0, result.output
    assert "Created user: Asha Rao" in result.output
    user = db.query(User).filter(User.email == "asha@example.com").one()
    assert user.name == "Asha Rao"


def test_create_user_duplicate_email(runner, make_user):
    existing = make_user()

    result = runner.invoke(
        cli_module.cli, ["create-user", "--name", "Copy", "--email", existing.email]
    )

    assert result.exit_code == 1
    assert "already exists" in result.output


def test_create_team_with_members(runner, db, make_user):
    lead = make_user(name="Lead")
    member = make_user(name="Member")
    lead_id, member_id = lead.id, member.id

    result = runner.invoke(
        cli_module.cli,
        [
            "create-team",
            "--name", "Alpha",
            "--lead-email", lead.email,
            "--member-email", member.email,
        ],
    )

    assert result.exit_code == 0, result.output
    team = db.query(Team).filter(Team.name == "Alpha").one()
    assert team.lead_id == lead_id
    assert [m.user_id for m in team.members] == [member_id]


def test_create_team_duplicate_name(runner, make_team):
    make_team(name="Alpha")

    result = runner.invoke(cli_module.cli, ["create-team", "--name", "Alpha"])

    assert result.exit_code == 1
    assert 'Team with name "Alpha" already exists' in result.output


def test_team_stats(runner, make_team):
    make_team()

    result = runner.invoke(cli_module.cli, ["team-stats"])

    assert result.exit_code == 0, result.output
    assert "total_teams: 1" in result.output


def test_mint_token(runner, make_user):
    user = make_user()
    user_id, token_version = user.id, user.token_version

    result = runner.invoke(cli_module.cli, ["mint-token", "--email", user.email])

    assert result.exit_code == 0, result.output
    payload = decode_session_token(result.output.strip())
    assert payload["sub"] == str(user_id)
    assert payload["token_version"] == token_version
