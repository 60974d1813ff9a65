# tests/test_companies.py
from modules.company_jobs.lib.companies import (
    CompanySuggestion,
    is_known_company,
    known_career_page,
    suggest_companies,
)


def test_known_company_is_substring_match():
    assert is_known_company("Netflix")
    assert is_known_company("Google LLC")
    assert not is_known_company("Acme Robotics")
    assert is_known_company("Acme", known=("acme",))


def test_known_career_page_exact_lookup():
    assert known_career_page("Stripe") == ("https://stripe.com/jobs", "Stripe")
    assert known_career_page("Stripe Payments") is None


DIR = (
    CompanySuggestion("Stripe", "stripe.com", "Fintech"),
    CompanySuggestion("Stripes Apparel", "stripesapparel.com"),
    CompanySuggestion("Pinstripe", "pinstripe.io"),
    CompanySuggestion("Shopify", "shopify.com"),
    CompanySuggestion("Alphabet", "google.com"),
)


def test_suggest_ranking_exact_prefix_contains():
    names = [c.name for c in suggest_companies("stripe", directory=DIR)]

    assert names[:3] == ["Stripe", "Stripes Apparel", "Pinstripe"]


def test_suggest_fuzzy_near_miss():
    names = [c.name for c in suggest_companies("shopfy", directory=DIR)]

    assert names == ["Shopify"]


def test_suggest_domain_match():
    names = [c.name for c in suggest_companies("google", directory=DIR)]

    assert names == ["Alphabet"]


def test_suggest_limit_and_blank():
    assert suggest_companies("", directory=DIR) == []
    assert len(suggest_companies("s", limit=2, directory=DIR)) == 2


def test_suggestion_to_dict_omits_missing():
    assert CompanySuggestion("Acme").to_dict() == {"name": "Acme"}
