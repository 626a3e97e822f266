"""
LeetCode metadata client.
Resolves a problem URL to its id, title, difficulty, tags and statement through
the public GraphQL endpoint.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

import httpx
from bs4 import BeautifulSoup

from ..config import settings
from ..exceptions import InvalidProblemURL, ProblemFetchError, ProblemNotFound

logger = logging.getLogger(__name__)

PROBLEM_URL_PATTERN = re.compile(r"leetcode\.com/problems/([^/?#]+)")

QUESTION_QUERY = """
query getQuestionDetail($titleSlug: String!) {
  question(titleSlug: $titleSlug) {
    questionFrontendId
    title
    titleSlug
    difficulty
    content
    topicTags {
      name
      slug
    }
    isPaidOnly
  }
}
"""


@dataclass
class ProblemMetadata:
    """Problem data as returned by the metadata source."""
    external_id: int
    title: str
    slug: str
    difficulty: str
    tags: List[str] = field(default_factory=list)
    description: Optional[str] = None


def extract_slug(url: str) -> str:
    """Get the title slug from a problem URL."""
    match = PROBLEM_URL_PATTERN.search(url or "")
    if not match:
        raise InvalidProblemURL("Invalid LeetCode URL")
    return match.group(1)


def html_to_text(content: Optional[str]) -> Optional[str]:
    """Plain text version of the HTML problem statement."""
    if not content:
        return None
    text = BeautifulSoup(content, "html.parser").get_text("\n")
    lines = [line.strip() for line in text.splitlines()]
    return "\n".join(line for line in lines if line) or None


class LeetCodeClient:
    """Fetches problem metadata from LeetCode."""

    def __init__(
        self,
        graphql_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.graphql_url = graphql_url or settings.leetcode.graphql_url
        self.timeout = settings.leetcode.timeout if timeout is None else timeout
        self.transport = transport

    def fetch_problem(self, url: str) -> ProblemMetadata:
        """
        Fetch metadata for a problem URL.

        Raises:
            InvalidProblemURL: URL is not a leetcode.com/problems/... link
            ProblemNotFound: LeetCode has no question for the slug
            ProblemFetchError: network failure or unexpected payload
        """
        slug = extract_slug(url)
        logger.info("Fetching LeetCode problem %s", slug)

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(
                    self.graphql_url,
                    json={"query": QUESTION_QUERY, "variables": {"titleSlug": slug}},
                    headers={"Content-Type": "application/json", "Referer": "https://leetcode.com"},
                )
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("LeetCode request for %s failed: %s", slug, e)
            raise ProblemFetchError(f"Failed to fetch problem data from LeetCode: {e}") from e

        if payload.get("errors"):
            message = payload["errors"][0].get("message", "Failed to fetch problem")
            raise ProblemNotFound(message)

        question = (payload.get("data") or {}).get("question")
        if not question:
            raise ProblemNotFound(f"Problem '{slug}' not found")

        try:
            external_id = int(question["questionFrontendId"])
        except (KeyError, TypeError, ValueError) as e:
            raise ProblemFetchError(f"Unexpected problem id for '{slug}'") from e

        return ProblemMetadata(
            external_id=external_id,
            title=question.get("title") or slug,
            slug=question.get("titleSlug") or slug,
            difficulty=(question.get("difficulty") or "").strip().lower(),
            tags=[t["name"] for t in question.get("topicTags") or [] if t.get("name")],
            description=html_to_text(question.get("content")),
        )


# Singleton instance
_leetcode_client: Optional[LeetCodeClient] = None


def get_leetcode_client() -> LeetCodeClient:
    """Get the singleton LeetCode client instance."""
    global _leetcode_client
    if _leetcode_client is None:
        _leetcode_client = LeetCodeClient()
    return _leetcode_client
