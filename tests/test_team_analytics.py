import uuid
from datetime import datetime, timezone

import pytest

from recruit_api.db.enums import CandidateProjectStatus, ProjectStatus
from recruit_api.db.models import Candidate, CandidateProject, Client, Project
from recruit_api.services import team_service
from recruit_api.services.errors import NotFoundError


def _project(db, team, title="Drive", status=ProjectStatus.ACTIVE, **kwargs):
    project = Project(title=title, team_id=team.id, status=status.value, **kwargs)
    db.add(project)
    db.flush()
    return project


def _candidate(db, project, status, first_name="Ana", **kwargs):
    candidate = Candidate(first_name=first_name, last_name="Diaz", **kwargs)
    db.add(candidate)
    db.flush()
    db.add(CandidateProject(candidate_id=candidate.id, project_id=project.id, status=status.value))
    db.flush()
    return candidate


def test_team_stats_empty_store(db):
    stats = team_service.get_team_stats(db)

    assert stats.total_teams == 0
    assert stats.teams_with_leads == 0
    assert stats.average_team_size == 0
    assert stats.teams_by_member_count == {}
    assert stats.average_projects_per_team == 0
    assert stats.average_candidates_per_team == 0


def test_team_stats_counts(db, make_user, make_team):
    lead = make_user(name="Lead")
    a, b, c = make_user(), make_user(), make_user()
    alpha = make_team(name="Alpha", lead_id=lead.id, members=(a, b))
    make_team(name="Beta", manager_id=lead.id, members=(c,))
    make_team(name="Gamma")
    _project(db, alpha)
    db.add(Candidate(first_name="Ana", last_name="Diaz", team_id=alpha.id))
    db.flush()

    stats = team_service.get_team_stats(db)

    assert stats.total_teams == 3
    assert stats.teams_with_leads == 1
    assert stats.teams_with_heads == 0
    assert stats.teams_with_managers == 1
    # Empty teams are not part of the size average
    assert stats.average_team_size == 1.5
    assert stats.teams_by_member_count == {"2": 1, "1": 1}
    assert stats.teams_with_projects == 1
    assert stats.teams_with_candidates == 1
    assert stats.average_projects_per_team == pytest.approx(1 / 3)
    assert stats.average_candidates_per_team == pytest.approx(1 / 3)


def test_team_summary(db, make_user, make_team):
    team = make_team(members=(make_user(), make_user()))
    active = _project(db, team, status=ProjectStatus.ACTIVE)
    _project(db, team, status=ProjectStatus.COMPLETED)
    _project(db, team, status=ProjectStatus.ON_HOLD)
    _project(db, team, status=ProjectStatus.COMPLETED)
    candidate = _candidate(db, active, CandidateProjectStatus.NOMINATED)
    other = _project(db, team, title="Other")
    db.add(CandidateProject(candidate_id=candidate.id, project_id=other.id, status="hired"))
    db.flush()

    summary = team_service.get_team_summary(db, team.id)

    assert summary.total_members == 2
    assert summary.total_projects == 5
    assert summary.active_projects == 2
    assert summary.completed_projects == 2
    assert summary.completion_rate == pytest.approx(40.0)
    assert summary.total_candidates == 1


def test_team_summary_without_projects(db, make_team):
    summary = team_service.get_team_summary(db, make_team().id)

    assert summary.total_projects == 0
    assert summary.completion_rate == 0


def test_team_projects(db, make_team):
    team = make_team()
    client = Client(name="Acme", type="enterprise")
    db.add(client)
    db.flush()
    project = _project(db, team, title="Backend hiring", client_id=client.id)
    _candidate(db, project, CandidateProjectStatus.NOMINATED)
    _candidate(db, project, CandidateProjectStatus.HIRED, first_name="Ben")
    _project(db, make_team(), title="Not ours")

    projects = team_service.get_team_projects(db, team.id)

    assert len(projects) == 1
    assert projects[0].title == "Backend hiring"
    assert projects[0].client.name == "Acme"
    assert projects[0].candidates_assigned == 2
    assert projects[0].progress == 0


def test_team_candidates(db, make_user, make_team):
    team = make_team()
    recruiter = make_user(name="Recruiter")
    project = _project(db, team, title="Data team")
    _candidate(
        db,
        project,
        CandidateProjectStatus.INTERVIEW_SCHEDULED,
        recruiter_id=recruiter.id,
        skills=["python", "sql"],
        total_experience=4.5,
    )
    _candidate(db, project, CandidateProjectStatus.NOMINATED, first_name="Ben")
    _candidate(db, _project(db, make_team()), CandidateProjectStatus.NOMINATED, first_name="Cy")

    candidates = {c.name: c for c in team_service.get_team_candidates(db, team.id)}

    assert set(candidates) == {"Ana Diaz", "Ben Diaz"}
    ana = candidates["Ana Diaz"]
    assert ana.assigned_project.title == "Data team"
    assert ana.assigned_by.name == "Recruiter"
    assert ana.skills == ["python", "sql"]
    assert ana.experience == 4.5
    ben = candidates["Ben Diaz"]
    assert ben.assigned_by.id is None
    assert ben.assigned_by.name == "Unknown"
    assert ben.experience == 0


def test_team_performance(db, make_team):
    team = make_team()
    now = datetime(2026, 6, 15, tzinfo=timezone.utc)
    march = _project(db, team, created_at=datetime(2026, 3, 10, tzinfo=timezone.utc))
    _candidate(db, march, CandidateProjectStatus.HIRED)
    _candidate(db, march, CandidateProjectStatus.HIRED, first_name="Ben")
    _candidate(db, march, CandidateProjectStatus.REJECTED_INTERVIEW, first_name="Cy")
    _project(db, team, created_at=datetime(2026, 6, 1, tzinfo=timezone.utc))
    # Outside the twelve month window
    old = _project(db, team, created_at=datetime(2025, 6, 30, tzinfo=timezone.utc))
    _candidate(db, old, CandidateProjectStatus.HIRED, first_name="Dee")

    performance = team_service.get_team_performance(db, team.id, now=now)

    months = {m.month: m for m in performance.monthly_data}
    assert len(performance.monthly_data) == 12
    assert performance.monthly_data[0].month == "2025-07"
    assert performance.monthly_data[-1].month == "2026-06"
    assert months["2026-03"].placements == 2
    assert months["2026-03"].revenue == 100_000
    assert months["2026-03"].projects == 1
    assert months["2026-03"].candidates == 3
    assert months["2026-06"].projects == 1
    assert performance.total_placements == 2
    assert performance.total_revenue == 100_000
    assert performance.average_monthly_placements == pytest.approx(2 / 12)


def test_team_success_rates(db, make_team):
    team = make_team()
    project = _project(db, team)
    _candidate(db, project, CandidateProjectStatus.HIRED)
    _candidate(db, project, CandidateProjectStatus.DOCUMENTS_SUBMITTED, first_name="Ben")
    _candidate(db, project, CandidateProjectStatus.REJECTED_DOCUMENTS, first_name="Cy")
    _candidate(db, project, CandidateProjectStatus.REJECTED_SELECTION, first_name="Dee")

    rates = team_service.get_team_success_rates(db, team.id)

    assert rates.total_candidates == 4
    assert rates.hired == 1
    assert rates.in_progress == 1
    assert rates.rejected == 2
    assert rates.success_rate == pytest.approx(25.0)
    assert rates.distribution.rejected == pytest.approx(50.0)


def test_team_success_rates_ignore_other_teams_projects(db, make_team):
    alpha = make_team(name="Alpha")
    beta = make_team(name="Beta")
    candidate = _candidate(db, _project(db, alpha), CandidateProjectStatus.HIRED)
    db.add(
        CandidateProject(
            candidate_id=candidate.id,
            project_id=_project(db, beta, title="Other drive").id,
            status=CandidateProjectStatus.DOCUMENTS_SUBMITTED.value,
        )
    )
    db.flush()

    alpha_rates = team_service.get_team_success_rates(db, alpha.id)
    beta_rates = team_service.get_team_success_rates(db, beta.id)

    assert (alpha_rates.hired, alpha_rates.in_progress) == (1, 0)
    assert (beta_rates.hired, beta_rates.in_progress) == (0, 1)
    assert beta_rates.success_rate == 0


def test_team_success_rates_without_candidates(db, make_team):
    rates = team_service.get_team_success_rates(db, make_team().id)

    assert rates.total_candidates == 0
    assert rates.success_rate == 0
    assert rates.distribution.hired == 0


@pytest.mark.parametrize(
    "operation",
    [
        team_service.get_team_summary,
        team_service.get_team_projects,
        team_service.get_team_candidates,
        team_service.get_team_performance,
        team_service.get_team_success_rates,
    ],
)
def test_per_team_operations_require_team(db, operation):
    with pytest.raises(NotFoundError):
        operation(db, uuid.uuid4())
