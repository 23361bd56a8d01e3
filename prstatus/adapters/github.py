"""GitHub GraphQL adapter: PR status, review decision and CI rollup in one call."""

from typing import Any, Dict

import requests
from pydantic import ValidationError

from prstatus.adapters.base import GitPlatformAdapter, GitPlatformError
from prstatus.models import PullRequestSnapshot

PR_STATUS_QUERY = " ".join(
    """
query($owner:String!,$repo:String!,$branch:String!) {
  repository(owner:$owner,name:$repo) {
    pullRequests(headRefName:$branch,first:1,orderBy:{field:UPDATED_AT,direction:DESC}) {
      nodes {
        number title state isDraft reviewDecision
        commits(last:1) {
          nodes { commit { statusCheckRollup { state } } }
        }
      }
    }
  }
}
""".split()
)


def snapshot_from_node(node: Dict[str, Any]) -> PullRequestSnapshot:
    """Build a snapshot from one pullRequests node.

    commits.nodes may be empty and statusCheckRollup may be null (no checks).
    """
    commits = (node.get("commits") or {}).get("nodes") or []
    rollup = ((commits[0] or {}).get("commit") or {}).get("statusCheckRollup") if commits else None
    return PullRequestSnapshot(
        number=node["number"],
        title=node.get("title") or "",
        state=node["state"],
        is_draft=bool(node.get("isDraft")),
        review_decision=node.get("reviewDecision") or None,
        ci_state=(rollup or {}).get("state") or None,
    )


class GitHubAdapter(GitPlatformAdapter):
    """GitHub GraphQL API implementation."""

    def __init__(
        self,
        token: str,
        graphql_url: str = "https://api.github.com/graphql",
        timeout: float = 10,
    ) -> None:
        self._graphql_url = graphql_url
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers["Authorization"] = f"Bearer {token}"
        self._session.headers["Content-Type"] = "application/json"

    def _graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = self._session.request(
                "POST",
                self._graphql_url,
                json={"query": query, "variables": variables},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise GitPlatformError(f"GraphQL request failed: {e}") from e
        if resp.status_code >= 400:
            msg = resp.text or resp.reason or str(resp.status_code)
            try:
                msg = resp.json().get("message", msg)
            except Exception:
                pass
            raise GitPlatformError(f"{resp.status_code}: {msg}")
        try:
            payload = resp.json()
        except ValueError as e:
            raise GitPlatformError(f"Malformed GraphQL response: {e}") from e
        if not isinstance(payload, dict):
            raise GitPlatformError("Malformed GraphQL response: not an object")
        data = payload.get("data")
        if not data:
            errors = payload.get("errors") or []
            messages = "; ".join(str(e.get("message", e)) for e in errors if isinstance(e, dict))
            raise GitPlatformError(f"GraphQL error: {messages or 'no data'}")
        return data

    def find_pull_request(self, owner: str, repo: str, branch: str) -> PullRequestSnapshot | None:
        data = self._graphql(PR_STATUS_QUERY, {"owner": owner, "repo": repo, "branch": branch})
        repository = data.get("repository")
        if not isinstance(repository, dict):
            raise GitPlatformError(f"Repository not found: {owner}/{repo}")
        nodes = (repository.get("pullRequests") or {}).get("nodes")
        if not isinstance(nodes, list):
            raise GitPlatformError("Malformed GraphQL response: missing pullRequests.nodes")
        if not nodes:
            return None
        try:
            return snapshot_from_node(nodes[0])
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            raise GitPlatformError(f"Malformed pull request node: {e}") from e
