"""Unit tests for query building."""

import pytest

from .models import SearchParameters
from .query import build_query, is_valid_handle


def describe_is_valid_handle():
    @pytest.mark.parametrize("handle", ["octocat", "a", "mojombo-1", "A1-b2-C3", "x" * 39])
    def it_accepts_github_logins(handle):
        assert is_valid_handle(handle)

    @pytest.mark.parametrize(
        "fragment",
        ["john smith", "-leading", "trailing-", "double--hyphen", "dot.name", "x" * 40, ""],
    )
    def it_rejects_everything_else(fragment):
        assert not is_valid_handle(fragment)


def describe_build_query():
    def it_uses_exact_match_for_handles():
        assert build_query(SearchParameters(username="octocat")) == "user:octocat"

    def it_uses_fuzzy_match_for_free_text():
        assert build_query(SearchParameters(username="john smith")) == '"john smith" in:login in:name'

    def it_uses_fuzzy_match_for_invalid_handle_chars():
        assert build_query(SearchParameters(username="jo.hn")) == "jo.hn in:login in:name"

    def it_trims_the_identity_fragment():
        assert build_query(SearchParameters(username="  octocat  ")) == "user:octocat"

    def it_adds_type_user_when_only_filters_are_given():
        assert build_query(SearchParameters(location="Berlin")) == "type:user location:Berlin"

    def it_omits_type_user_when_identity_is_given():
        assert build_query(SearchParameters(username="octocat", location="Berlin")) == (
            "user:octocat location:Berlin"
        )

    def it_prefers_explicit_account_type():
        assert build_query(SearchParameters(location="Berlin", account_type="Org")) == (
            "type:org location:Berlin"
        )

    def it_quotes_locations_with_whitespace():
        assert build_query(SearchParameters(username="test", location="San Francisco")) == (
            'user:test location:"San Francisco"'
        )

    def it_quotes_companies_with_whitespace():
        q = build_query(SearchParameters(company="Acme Corp"))
        assert q == 'type:user company:"Acme Corp"'

    def it_renders_inclusive_ranges():
        q = build_query(
            SearchParameters(min_repos=5, max_repos=50, min_followers="10", max_followers=1000.0)
        )
        assert q == "type:user repos:>=5 repos:<=50 followers:>=10 followers:<=1000"

    @pytest.mark.parametrize(
        "bad", [0, -3, "abc", "5.5", 2.5, float("inf"), float("nan"), True, None, [1], "\u00b2", "\u0663"]
    )
    def it_drops_non_positive_or_malformed_counts(bad):
        assert build_query(SearchParameters(username="octocat", min_repos=bad)) == "user:octocat"

    def it_drops_superscript_digits_from_dicts():
        assert build_query({"minRepos": "\u00b2", "location": "x"}) == "type:user location:x"

    def it_sanitizes_language():
        assert build_query(SearchParameters(language="C++")) == "type:user language:C++"
        assert build_query(SearchParameters(language="C#")) == "type:user language:C#"
        assert build_query(SearchParameters(language='Java"Script; x:y')) == (
            "type:user language:JavaScriptxy"
        )

    def it_drops_language_that_sanitizes_to_nothing():
        assert build_query(SearchParameters(username="octocat", language="!!!")) == "user:octocat"

    def it_passes_created_through():
        assert build_query(SearchParameters(created=">2015-01-01")) == "type:user created:>2015-01-01"

    def it_adds_hireable_only_when_true():
        assert build_query(SearchParameters(location="Oslo", hireable=True)) == (
            "type:user location:Oslo is:hireable"
        )
        assert build_query(SearchParameters(location="Oslo", hireable=False)) == (
            "type:user location:Oslo"
        )

    def it_composes_in_fixed_order():
        q = build_query(
            SearchParameters(
                username="test",
                location="San Francisco",
                min_repos=5,
                language="JavaScript",
            )
        )
        assert q == 'user:test location:"San Francisco" repos:>=5 language:JavaScript'

    def it_returns_empty_string_without_filters():
        assert build_query(SearchParameters()) == ""
        assert build_query(SearchParameters(username="   ", location="", language="!!")) == ""

    def it_accepts_camel_case_dicts():
        assert build_query({"username": "octocat", "minRepos": 3}) == "user:octocat repos:>=3"

    def it_is_deterministic():
        params = SearchParameters(username="john smith", location="New York", min_followers=10, language="Go")
        assert build_query(params) == build_query(params)
        assert build_query(params) == build_query(
            SearchParameters(username="john smith", location="New York", min_followers=10, language="Go")
        )

    def it_ignores_paging_and_sorting():
        a = build_query(SearchParameters(username="octocat", page=1, sort="followers"))
        b = build_query(SearchParameters(username="octocat", page=7, sort="joined", order="asc"))
        assert a == b
