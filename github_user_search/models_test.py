"""Unit tests for models."""

import pytest

from .errors import ErrorKind, NotFoundError, RequestCancelled
from .models import (
    Result,
    SearchParameters,
    SortKey,
    SortOrder,
    UserProfile,
    UserSummary,
    has_more_pages,
)


def describe_SearchParameters():
    def it_has_ui_defaults():
        params = SearchParameters()
        assert params.page == 1
        assert params.per_page == 10
        assert params.sort is SortKey.FOLLOWERS
        assert params.order is SortOrder.DESC

    def it_clamps_paging():
        assert SearchParameters(per_page=500).per_page == 100
        assert SearchParameters(per_page=0).per_page == 1
        assert SearchParameters(page=-2).page == 1
        assert SearchParameters(page="3", per_page="20").per_page == 20
        assert SearchParameters(page="nope").page == 1

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def it_falls_back_on_non_finite_paging(value):
        params = SearchParameters.from_dict({"location": "x", "page": value, "perPage": value})
        assert params.page == 1
        assert params.per_page == 10

    def it_falls_back_on_unknown_sort_values():
        params = SearchParameters(sort="stars", order="sideways")
        assert params.sort is SortKey.FOLLOWERS
        assert params.order is SortOrder.DESC

    def it_reads_camel_case_keys():
        params = SearchParameters.from_dict(
            {"username": "test", "minRepos": 5, "perPage": 20, "sort": "repositories", "order": "asc", "bogus": 1}
        )
        assert params.username == "test"
        assert params.min_repos == 5
        assert params.per_page == 20
        assert params.sort is SortKey.REPOSITORIES
        assert params.order is SortOrder.ASC

    def describe_request_params():
        def it_includes_sort_and_order():
            params = SearchParameters(page=2, per_page=20, sort="repositories", order="asc")
            assert params.request_params("q") == {
                "q": "q", "page": 2, "per_page": 20, "sort": "repositories", "order": "asc",
            }

        def it_omits_sort_for_relevance():
            params = SearchParameters(sort="relevance")
            assert params.request_params("q") == {"q": "q", "page": 1, "per_page": 10}


def describe_has_more_pages():
    def it_is_true_before_the_last_page():
        assert has_more_pages(1, 10, 1000)

    def it_is_false_on_the_last_page():
        assert not has_more_pages(100, 10, 1000)

    def it_caps_at_the_search_result_limit():
        assert not has_more_pages(10, 100, 250_000)

    def it_is_false_for_a_single_partial_page():
        assert not has_more_pages(1, 10, 1)


def describe_UserProfile():
    def it_degrades_a_summary():
        summary = UserSummary(id=1, login="octocat", avatar_url="a", html_url="h", score=1.0)
        profile = UserProfile.from_summary(summary)
        assert profile.login == "octocat"
        assert profile.score == 1.0
        assert profile.followers is None
        assert not profile.details_available

    def it_keeps_summary_fields_on_merge():
        summary = UserSummary(id=1, login="octocat", html_url="h", type="User", score=3.5)
        profile = UserProfile.merge(summary, {"id": 1, "login": "octocat", "bio": "hi", "hireable": True})
        assert profile.score == 3.5
        assert profile.type == "User"
        assert profile.bio == "hi"
        assert profile.hireable is True
        assert profile.details_available


def describe_Result():
    def it_wraps_success():
        result = Result.success({"login": "octocat"})
        assert result.ok
        assert result.to_dict() == {"data": {"login": "octocat"}, "error": None}

    def it_wraps_failures():
        result = Result.failure(NotFoundError())
        assert not result.ok
        assert result.kind is ErrorKind.NOT_FOUND
        assert result.data is None
        assert result.error

    def it_keeps_cancellation_silent():
        result = Result.failure(RequestCancelled("superseded"))
        assert result.cancelled
        assert result.error is None
        assert result.data is None
