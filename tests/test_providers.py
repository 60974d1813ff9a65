# tests/test_providers.py
import asyncio

import pytest

from modules.company_jobs.lib.config import Settings
from modules.company_jobs.lib.credentials import APIConfig
from modules.company_jobs.lib.providers import StubProvider, all_names, build_providers, get, register
from modules.company_jobs.lib.providers.ashby import AshbyProvider
from modules.company_jobs.lib.providers.base import Provider
from modules.company_jobs.lib.providers.career_page import CareerPageSuggestionProvider, suggestion_for
from modules.company_jobs.lib.providers.diffbot import DIFFBOT_URL, CareerPagesProvider
from modules.company_jobs.lib.providers.free_apis import ARBEITNOW_URL, JOBICY_URL, FreeApisProvider
from modules.company_jobs.lib.providers.google_jobs import SERPAPI_URL, GoogleJobsProvider
from modules.company_jobs.lib.providers.google_search import CSE_URL, GoogleSearchProvider
from modules.company_jobs.lib.providers.greenhouse import GreenhouseProvider
from modules.company_jobs.lib.providers.jsearch import JSearchProvider
from modules.company_jobs.lib.providers.lever import LeverProvider
from modules.company_jobs.lib.providers.recruitee import RecruiteeProvider
from modules.company_jobs.lib.providers.rss import RssProvider, parse_feed
from modules.company_jobs.lib.providers.text import extract_job_title, extract_location, mentions_company

from conftest import FakeHttpClient, http_error

NO_KEYS = APIConfig()
GH = "https://api.greenhouse.io/v1/boards"


def fetch(provider, company="Acme Corp", config=NO_KEYS):
    return asyncio.run(provider.fetch(company, config))


# ---------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------
def test_every_adapter_is_registered():
    names = set(all_names())
    assert {
        "jsearch", "rss", "free_apis", "greenhouse", "lever", "workable", "ashby", "recruitee",
        "google_jobs", "career_pages", "linkedin", "google_search", "apify_quick", "apify_deep",
        "career_page_suggestion", "stub",
    } <= names
    assert get("Greenhouse") is GreenhouseProvider


def test_build_providers_shares_client_and_skips_stub(settings):
    client = FakeHttpClient()
    providers = build_providers(settings, client)

    assert "stub" not in providers
    assert all(isinstance(p, Provider) for p in providers.values())
    assert providers["lever"]._client is client


def test_register_rejects_name_clash():
    class Other:
        name = "greenhouse"

    with pytest.raises(ValueError):
        register(Other)


# ---------------------------------------------------------------------
# ATS boards (identifier probing)
# ---------------------------------------------------------------------
def test_greenhouse_tries_identifiers_until_a_board_answers(fake_http, settings, frozen_utc):
    fake_http.route(f"{GH}/acme-corp/jobs", {"jobs": [
        {
            "title": "Platform Engineer",
            "location": {"name": "Denver, CO"},
            "absolute_url": "https://boards.greenhouse.io/acme/jobs/1",
            "content": "&lt;p&gt;Pay: $120,000 - $150,000 per year&lt;/p&gt;",
            "updated_at": "2024-12-31T10:00:00Z",
        },
        {"title": "", "offices": [{"name": "Remote"}]},
    ]})
    result = fetch(GreenhouseProvider(settings, fake_http))

    assert result.success
    assert [u.split("/")[-2] for u in fake_http.urls()] == ["acme corp", "acmecorp", "acme-corp"]
    first, second = result.jobs
    assert first.title == "Platform Engineer"
    assert first.location == "Denver, CO"
    assert first.salary == "$120,000 - $150,000 per year"
    assert first.date_posted == "Today"
    assert first.ats_source == "Greenhouse"
    assert first.company == "Acme Corp"
    assert second.title == "Untitled Position"
    assert second.location == "Remote"
    assert second.source_url == "https://boards.greenhouse.io/acme-corp"


def test_empty_board_moves_to_next_identifier(fake_http, settings):
    fake_http.route(f"{GH}/acme corp/jobs", {"jobs": []})
    fake_http.route(f"{GH}/acmecorp/jobs", {"jobs": [{"title": "SRE"}]})
    result = fetch(GreenhouseProvider(settings, fake_http))

    assert [j.title for j in result.jobs] == ["SRE"]
    assert result.jobs[0].source_url == "https://boards.greenhouse.io/acmecorp"


def test_no_matching_board_is_one_failure(fake_http, settings):
    result = fetch(GreenhouseProvider(settings, fake_http))

    assert not result.success
    assert result.error == "Greenhouse: no board found after 5 identifiers (last: HTTP 404 Not Found)"
    assert len(fake_http.calls) == 5


def test_lever_maps_postings(fake_http, settings, frozen_utc):
    # outer list = one response per call; Lever answers with a bare list
    fake_http.route("https://api.lever.co/v0/postings/acme", [[{
        "text": "Designer",
        "categories": {"location": "Toronto", "commitment": "Contract"},
        "hostedUrl": "https://jobs.lever.co/acme/1",
        "createdAt": 1735603200000,
    }]])
    (job,) = fetch(LeverProvider(settings, fake_http), "Acme").jobs

    assert (job.title, job.location, job.job_type) == ("Designer", "Toronto", "Contract")
    assert job.date_posted == "Yesterday"
    assert fake_http.calls[0][2]["params"] == {"mode": "json"}


def test_ashby_and_recruitee_mapping(fake_http, settings):
    fake_http.route("https://api.ashbyhq.com/posting-api/job-board/acme", {"jobs": [
        {"title": "ML Engineer", "locationName": "Remote", "compensationTierSummary": "$150K - $200K"},
    ]})
    fake_http.route("https://acme.recruitee.com/api/offers", {"offers": [
        {"title": "Chef", "city": "Berlin", "country": "Germany", "careers_url": "https://acme.recruitee.com/o/chef"},
    ]})

    (ml,) = fetch(AshbyProvider(settings, fake_http), "Acme").jobs
    (chef,) = fetch(RecruiteeProvider(settings, fake_http), "Acme").jobs

    assert ml.salary == "$150K - $200K"
    assert ml.source_url == "https://jobs.ashbyhq.com/acme"
    assert chef.location == "Berlin, Germany"
    assert chef.ats_source == "Recruitee"


# ---------------------------------------------------------------------
# JSearch
# ---------------------------------------------------------------------
def test_jsearch_skips_without_key(fake_http, settings):
    result = fetch(JSearchProvider(settings, fake_http))

    assert result.skipped
    assert result.error is None
    assert fake_http.calls == []


def test_jsearch_maps_records(fake_http, settings, frozen_utc):
    fake_http.route("https://jsearch.p.rapidapi.com/search", {"status": "OK", "data": [{
        "job_title": "Backend Engineer",
        "employer_name": "Acme",
        "job_city": "Austin",
        "job_state": "TX",
        "job_apply_link": "https://acme.com/apply/1",
        "job_min_salary": 120000.0,
        "job_max_salary": 150000.0,
        "job_salary_currency": "USD",
        "job_employment_type": "FULLTIME",
        "job_posted_at_timestamp": 1735603200,
        "job_description": "x" * 400,
        "job_required_skills": ["python", "aws"],
    }, {
        "job_title": "Analyst",
        "job_country": "US",
        "job_salary_period": "YEAR",
    }]})
    result = fetch(JSearchProvider(settings, fake_http), "Acme", APIConfig({"jsearch": "SECRET"}))

    first, second = result.jobs
    assert first.location == "Austin, TX"
    assert first.salary == "USD120000 - USD150000"
    assert first.date_posted == "Yesterday"
    assert first.description == "x" * 300 + "..."
    assert first.skills == ("python", "aws")
    assert second.location == "US"
    assert second.company == "Acme"
    assert second.salary == "Salary info available (YEAR)"
    headers = fake_http.calls[0][2]["headers"]
    assert headers["X-RapidAPI-Key"] == "SECRET"
    assert fake_http.calls[0][2]["params"]["query"] == "Acme jobs"


def test_jsearch_error_status(fake_http, settings):
    fake_http.route("https://jsearch.p.rapidapi.com/search", {"status": "ERROR", "error": {"message": "quota"}})
    result = fetch(JSearchProvider(settings, fake_http), config=APIConfig({"jsearch": "k"}))

    assert result.error == "JSearch (Google Jobs): quota"


def test_http_failure_reason_has_no_secret(fake_http, settings):
    fake_http.route("https://jsearch.p.rapidapi.com/search", http_error(401))
    result = fetch(JSearchProvider(settings, fake_http), config=APIConfig({"jsearch": "SECRET"}))

    assert result.error == "JSearch (Google Jobs): HTTP 401 Unauthorized"
    assert "SECRET" not in result.error


# ---------------------------------------------------------------------
# RSS
# ---------------------------------------------------------------------
FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"><channel><title>Acme careers</title>
  <item>
    <title><![CDATA[Senior Engineer opening]]></title>
    <link>https://acme.com/jobs/1</link>
    <description><![CDATA[<p>Join us in Berlin, Germany. Great team.</p>]]></description>
    <pubDate>Tue, 31 Dec 2024 10:00:00 GMT</pubDate>
  </item>
  <item>
    <title>Company picnic photos</title>
    <link>https://acme.com/blog/1</link>
  </item>
  <item>
    <title>We are hiring designers</title>
  </item>
</channel></rss>
"""


def test_parse_feed_keeps_job_items(frozen_utc):
    jobs = parse_feed(FEED, "Acme")

    assert [j.title for j in jobs] == ["Senior Engineer opening", "We are hiring designers"]
    first, second = jobs
    assert first.source_url == "https://acme.com/jobs/1"
    assert first.location == "Berlin, Germany"
    assert first.description == "Join us in Berlin, Germany. Great team."
    assert first.date_posted == "Today"
    assert first.ats_source == "RSS Feed"
    assert second.location == "Remote/Multiple locations"
    assert second.source_url == "#"


def test_rss_fails_only_when_no_feed_reachable(fake_http, settings):
    result = fetch(RssProvider(settings, fake_http), "Acme")

    assert not result.success
    assert result.error.startswith("RSS Feeds: no feed reachable (HTTP 404")
    assert len(fake_http.calls) == 3


def test_rss_reachable_feed_without_jobs_is_empty_success(fake_http, settings):
    fake_http.route("https://careers.acme.com/feed", "<rss><channel><item><title>Picnic</title></item></channel></rss>")
    result = fetch(RssProvider(settings, fake_http), "Acme")

    assert result.success
    assert result.jobs == ()


# ---------------------------------------------------------------------
# Free job APIs
# ---------------------------------------------------------------------
def test_free_apis_filters_and_tolerates_one_board_failing(fake_http, settings, frozen_utc):
    fake_http.route(ARBEITNOW_URL, {"data": [
        {"title": "Werkstudent", "company_name": "Acme GmbH", "location": "Berlin", "url": "https://a/1",
         "created_at": 1735603200, "job_types": ["internship"], "tags": []},
        {"title": "Unrelated", "company_name": "Other", "description": "nothing", "tags": ["python"]},
        {"title": "Old", "company_name": "Acme", "created_at": 1000000000},
        {"title": "Tagged", "company_name": "Agency", "tags": ["acme"]},
    ]})
    fake_http.route(JOBICY_URL, http_error(500))
    result = fetch(FreeApisProvider(settings, fake_http), "Acme")

    assert result.success
    assert [j.title for j in result.jobs] == ["Werkstudent", "Tagged"]
    werk = result.jobs[0]
    assert (werk.ats_source, werk.date_posted, werk.job_type) == ("Arbeitnow", "Yesterday", "internship")
    assert result.jobs[1].location == "Remote"


def test_jobicy_mapping(fake_http, settings):
    fake_http.route(ARBEITNOW_URL, {"data": []})
    fake_http.route(JOBICY_URL, {"jobs": [
        {"jobTitle": "Support Lead", "companyName": "Acme", "url": "https://j/1",
         "annualSalaryMin": 50000, "annualSalaryMax": 70000, "jobType": ["full-time"]},
        {"jobTitle": "Support Lead", "companyName": "Someone Else"},
    ]})
    (job,) = fetch(FreeApisProvider(settings, fake_http), "Acme").jobs

    assert job.salary == "$50000 - $70000"
    assert job.location == "Remote"
    assert job.job_type == "full-time"


def test_free_apis_fail_when_both_boards_fail(fake_http, settings):
    fake_http.route(JOBICY_URL, http_error(500))
    result = fetch(FreeApisProvider(settings, fake_http), "Acme")

    assert result.error == "Free Job APIs: Arbeitnow HTTP 404 Not Found; Jobicy HTTP 500 Internal Server Error"


# ---------------------------------------------------------------------
# Credentialed sources
# ---------------------------------------------------------------------
def test_google_jobs_caps_results(fake_http):
    fake_http.route(SERPAPI_URL, {"jobs_results": [
        {"title": f"T{i}", "company_name": "Acme", "location": "NYC",
         "detected_extensions": {"posted_at": "3 days ago", "schedule_type": "Part-time"},
         "apply_options": [{"link": f"https://a/{i}"}]}
        for i in range(5)
    ]})
    result = fetch(GoogleJobsProvider(Settings(max_results=2), fake_http), "Acme", APIConfig({"serpapi": "k"}))

    assert [j.title for j in result.jobs] == ["T0", "T1"]
    assert result.jobs[0].date_posted == "3 days ago"
    assert result.jobs[0].job_type == "Part-time"
    assert result.jobs[0].source_url == "https://a/0"
    assert result.jobs[0].ats_source == "Google Jobs"


def test_google_jobs_error_payload(fake_http, settings):
    fake_http.route(SERPAPI_URL, {"error": "Invalid API key."})
    result = fetch(GoogleJobsProvider(settings, fake_http), "Acme", APIConfig({"serpapi": "k"}))

    assert result.error == "Google Jobs (SerpApi): Invalid API key."


def test_career_pages_tries_urls_in_order(fake_http, settings):
    def analyze(url, kwargs):
        if kwargs["params"]["url"] == "https://jobs.acme.com":
            return {"objects": [{"title": "Engineer", "location": "Remote", "skills": ["go"]}, {"title": ""}]}
        return http_error(404)

    fake_http.route(DIFFBOT_URL, analyze)
    result = fetch(CareerPagesProvider(settings, fake_http), "Acme", APIConfig({"diffbot": "t"}))

    (job,) = result.jobs
    assert job.source_url == "https://jobs.acme.com"
    assert job.skills == ("go",)
    assert job.ats_source == "Company Career Page"
    assert len(fake_http.calls) == 2


def test_google_search_needs_both_credentials(fake_http, settings):
    provider = GoogleSearchProvider(settings, fake_http)

    assert fetch(provider, "Acme", APIConfig({"google_cse_key": "k"})).skipped
    assert fake_http.calls == []


def test_google_search_maps_items(fake_http, settings):
    fake_http.route(CSE_URL, [
        {"items": [
            {"title": "Senior Engineer - Acme | LinkedIn", "link": "https://l/1", "snippet": "Hiring in Austin, TX."},
            {"title": "Acme Blog", "link": "https://l/2", "snippet": ""},
        ]},
        http_error(500),
    ])
    config = APIConfig({"google_cse_key": "k", "google_cse_id": "cx"})
    result = fetch(GoogleSearchProvider(settings, fake_http), "Acme", config)

    assert result.success
    first, second = result.jobs
    assert (first.title, first.location) == ("Senior Engineer", "Austin, TX")
    assert second.title == "Career Opportunity"
    assert first.date_posted == "Recently posted"
    assert len(fake_http.calls) == 2


# ---------------------------------------------------------------------
# Offline providers + text helpers
# ---------------------------------------------------------------------
def test_career_page_suggestion():
    known = suggestion_for("Stripe")
    assert (known.title, known.count, known.source_url) == ("Various Open Positions", "Multiple", "https://stripe.com/jobs")

    unknown = fetch(CareerPageSuggestionProvider(), "Acme Robotics").jobs[0]
    assert unknown.title == "Check Career Page"
    assert unknown.source_url == "https://careers.acmerobotics.com"
    assert unknown.date_posted == "Check career page"


def test_stub_provider_modes():
    ok = StubProvider(items=[{"title": "SRE"}])
    failing = StubProvider(error="down")
    keyed = StubProvider(credentials=("jsearch",))

    assert fetch(ok).jobs[0].title == "SRE"
    assert fetch(failing).error == "Stub: down"
    assert fetch(keyed).skipped
    assert ok.companies == ["Acme Corp"]


def test_text_helpers():
    assert extract_job_title("Staff Developer | Indeed") == "Staff Developer"
    assert extract_job_title("Acme quarterly results") is None
    assert extract_location("Remote-first team") == "Remote"
    assert extract_location("Based in Paris, France; apply today") == "Paris, France"
    assert mentions_company("Acme", "ACME Inc")
    assert mentions_company("Acme Inc", "acme")
    assert not mentions_company("Acme", None, "")
