"""Tests for the LeetCode metadata client."""
import json

import httpx
import pytest

from leetlog.config import settings
from leetlog.exceptions import InvalidProblemURL, ProblemFetchError, ProblemNotFound
from leetlog.services.leetcode_service import LeetCodeClient, extract_slug, html_to_text

GRAPHQL_URL = "https://leetcode.test/graphql"

TWO_SUM = {
    "questionFrontendId": "1",
    "title": "Two Sum",
    "titleSlug": "two-sum",
    "difficulty": "Easy",
    "content": "<p>Given an array of integers <code>nums</code>,</p>\n<p>return indices.</p>",
    "topicTags": [{"name": "Array", "slug": "array"}, {"name": "Hash Table", "slug": "hash-table"}],
    "isPaidOnly": False,
}


def make_client(handler) -> LeetCodeClient:
    return LeetCodeClient(graphql_url=GRAPHQL_URL, timeout=5, transport=httpx.MockTransport(handler))


@pytest.mark.parametrize(
    "url,slug",
    [
        ("https://leetcode.com/problems/two-sum/", "two-sum"),
        ("https://leetcode.com/problems/two-sum/description/", "two-sum"),
        ("leetcode.com/problems/lru-cache?envType=study-plan", "lru-cache"),
        ("https://leetcode.com/problems/3sum#comments", "3sum"),
    ],
)
def test_extract_slug(url, slug) -> None:
    assert extract_slug(url) == slug


@pytest.mark.parametrize("url", ["", "https://example.com/problems/two-sum", "https://leetcode.com/contest/"])
def test_extract_slug_rejects_other_urls(url) -> None:
    with pytest.raises(InvalidProblemURL):
        extract_slug(url)


def test_html_to_text() -> None:
    assert html_to_text("<p>Hello <b>there</b></p>\n<p></p><p>Bye</p>") == "Hello\nthere\nBye"
    assert html_to_text(None) is None
    assert html_to_text("<p> </p>") is None


def test_fetch_problem() -> None:
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"data": {"question": TWO_SUM}})

    metadata = make_client(handler).fetch_problem("https://leetcode.com/problems/two-sum/")

    assert metadata.external_id == 1
    assert metadata.title == "Two Sum"
    assert metadata.slug == "two-sum"
    assert metadata.difficulty == "easy"
    assert metadata.tags == ["Array", "Hash Table"]
    assert metadata.description.startswith("Given an array of integers")

    body = json.loads(requests[0].content)
    assert str(requests[0].url) == GRAPHQL_URL
    assert body["variables"] == {"titleSlug": "two-sum"}


def test_fetch_problem_graphql_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"errors": [{"message": "That question does not exist."}]})

    with pytest.raises(ProblemNotFound, match="does not exist"):
        make_client(handler).fetch_problem("https://leetcode.com/problems/nope/")


def test_fetch_problem_missing_question() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": {"question": None}})

    with pytest.raises(ProblemNotFound):
        make_client(handler).fetch_problem("https://leetcode.com/problems/nope/")


def test_fetch_problem_http_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    with pytest.raises(ProblemFetchError):
        make_client(handler).fetch_problem("https://leetcode.com/problems/two-sum/")


def test_fetch_problem_connection_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ProblemFetchError):
        make_client(handler).fetch_problem("https://leetcode.com/problems/two-sum/")


def test_fetch_problem_bad_payload() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>not json</html>")

    with pytest.raises(ProblemFetchError):
        make_client(handler).fetch_problem("https://leetcode.com/problems/two-sum/")


def test_fetch_problem_without_id() -> None:
    question = dict(TWO_SUM, questionFrontendId=None)

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": {"question": question}})

    with pytest.raises(ProblemFetchError):
        make_client(handler).fetch_problem("https://leetcode.com/problems/two-sum/")


def test_fetch_invalid_url_makes_no_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(InvalidProblemURL):
        make_client(handler).fetch_problem("https://example.com/two-sum")


def test_client_timeout_defaults() -> None:
    assert LeetCodeClient().timeout == settings.leetcode.timeout
    assert LeetCodeClient(timeout=0).timeout == 0
