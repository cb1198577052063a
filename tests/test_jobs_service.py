from datetime import datetime, timedelta, timezone

import pytest

from primoboost.core.jobs_service import (
    APPLICATIONS_TABLE,
    JOBS_TABLE,
    JobNotFoundError,
    JobsService,
    eligible_year_tags,
    posted_days_ago,
    skill_tags,
)
from primoboost.core.resume_optimizer import ResumeOptimizer
from primoboost.models.jobs import ApplicationMethod, JobListing
from primoboost.storage.database import InMemoryDatabase
from tests.conftest import chat_response

NOW = datetime(2025, 10, 20, 12, 0, tzinfo=timezone.utc)


def job_row(job_id, company, role, days_old, **extra):
    return {
        "id": job_id,
        "company_name": company,
        "role_title": role,
        "posted_date": (NOW - timedelta(days=days_old)).isoformat(),
        "is_active": True,
        **extra,
    }


@pytest.fixture
def database():
    return InMemoryDatabase({JOBS_TABLE: [
        job_row("job-1", "Acme", "Backend Engineer", 5, domain="Backend", location_type="Remote",
                short_description="Python and AWS services", eligible_years="2024, 2025"),
        job_row("job-2", "Globex", "Frontend Developer", 1, domain="Frontend", location_type="Onsite"),
        job_row("job-3", "Initech", "Data Engineer", 3, domain="Backend", location_type="Remote"),
        job_row("job-4", "Acme", "Old Role", 0, is_active=False),
    ]})


class TestTags:
    @pytest.mark.parametrize("raw, expected", [
        (None, []),
        ("", []),
        ("2024, 2025 | 2026", ["2024", "2025", "2026"]),
        ("2023/2024/2024", ["2023", "2024"]),
        ("2022 2023 2024 2025", ["2022", "2023", "2024"]),
        ([" 2024 ", "2024", "2025"], ["2024", "2025"]),
    ])
    def test_eligible_year_tags(self, raw, expected):
        assert eligible_year_tags(raw) == expected

    def test_skill_tags_domain_first(self):
        job = JobListing(
            id="j", company_name="Acme", role_title="SDE", posted_date=NOW,
            domain="Cloud", short_description="Docker, Kubernetes and SQL on AWS",
        )
        assert skill_tags(job) == ["Cloud", "SQL", "AWS", "DOCKER", "KUBERNETES"]

    def test_skill_tags_capped_at_eight(self):
        job = JobListing(
            id="j", company_name="Acme", role_title="SDE", posted_date=NOW, domain="Full Stack",
            short_description="react node.js python java typescript javascript sql aws docker kubernetes",
        )
        tags = skill_tags(job)
        assert len(tags) == 8
        assert tags[0] == "Full Stack"

    def test_posted_days_ago_floors(self):
        assert posted_days_ago(NOW - timedelta(days=2, hours=23), NOW) == 2
        assert posted_days_ago(NOW - timedelta(hours=5), NOW) == 0

    def test_naive_dates_are_utc(self):
        assert posted_days_ago(datetime(2025, 10, 17, 12, 0), NOW) == 3


class TestListing:
    async def test_active_newest_first(self, database):
        jobs = await JobsService(database).list_jobs()
        assert [j.id for j in jobs] == ["job-2", "job-3", "job-1"]

    async def test_filters_and_pagination(self, database):
        service = JobsService(database)
        remote = await service.list_jobs(location_type="Remote")
        assert [j.id for j in remote] == ["job-3", "job-1"]

        page = await service.list_jobs(domain="Backend", limit=1, offset=1)
        assert [j.id for j in page] == ["job-1"]

    async def test_search_matches_title_or_company(self, database):
        service = JobsService(database)
        assert [j.id for j in await service.list_jobs(search="engineer")] == ["job-3", "job-1"]
        assert [j.id for j in await service.list_jobs(search="GLOBEX")] == ["job-2"]
        assert [j.id for j in await service.list_jobs(search="engineer", offset=1)] == ["job-1"]

    async def test_get_tags(self, database):
        tags = await JobsService(database).get_tags("job-1", now=NOW)
        assert tags.skill_tags == ["Backend", "PYTHON", "AWS"]
        assert tags.eligible_year_tags == ["2024", "2025"]
        assert tags.posted_days_ago == 5

    async def test_unknown_job(self, database):
        with pytest.raises(JobNotFoundError):
            await JobsService(database).get_job("missing")


class TestApplications:
    async def test_apply_records_submission(self, database):
        application = await JobsService(database).apply(
            "user-1", "job-1", ApplicationMethod.AUTO, optimized_resume_id="resume-9"
        )

        assert application.status == "submitted"
        assert application.application_method == ApplicationMethod.AUTO
        [row] = database.rows(APPLICATIONS_TABLE)
        assert row["job_id"] == "job-1"
        assert row["optimized_resume_id"] == "resume-9"

    async def test_apply_to_unknown_job(self, database):
        with pytest.raises(JobNotFoundError):
            await JobsService(database).apply("user-1", "missing", ApplicationMethod.MANUAL)
        assert database.rows(APPLICATIONS_TABLE) == []


class TestCompanyDescription:
    async def test_enrich(self, database, make_llm):
        optimizer = ResumeOptimizer(make_llm(lambda request: chat_response("Acme makes anvils.")))
        text = await JobsService(database, optimizer).enrich_company_description("job-1")
        assert text == "Acme makes anvils."

    async def test_enrich_without_optimizer(self, database):
        with pytest.raises(RuntimeError):
            await JobsService(database).enrich_company_description("job-1")
