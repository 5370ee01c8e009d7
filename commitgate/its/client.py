from typing import Optional, Protocol, Tuple

import requests

from commitgate.config import get_its_base_url, get_its_credentials, get_its_timeout_seconds


class ItsClientError(RuntimeError):
    """Base issue-tracker integration error."""


class ItsDependencyTimeout(ItsClientError):
    """Raised when tracker API calls exceed configured timeout."""


class ItsDependencyUnavailable(ItsClientError):
    """Raised for transport/server errors from the tracker."""


class ItsFacade(Protocol):
    def exists(self, issue_id: str) -> bool:
        """
        True when the issue exists, False when the tracker says it does not.
        Raises ItsClientError when the tracker cannot answer.
        """
        ...


class RestItsClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        auth: Optional[Tuple[str, str]] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.base_url = (base_url if base_url is not None else get_its_base_url()).rstrip("/")
        self.auth = auth if auth is not None else get_its_credentials()
        self.headers = {"Accept": "application/json"}
        self.default_timeout_seconds = (
            float(timeout_seconds) if timeout_seconds is not None else get_its_timeout_seconds()
        )

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(
        self,
        method: str,
        path: str,
        *,
        timeout: Optional[float] = None,
        **kwargs,
    ) -> requests.Response:
        if not self.base_url:
            raise ItsDependencyUnavailable("issue tracker base URL is not configured")
        effective_timeout = timeout if timeout is not None else self.default_timeout_seconds
        try:
            return requests.request(
                method.upper(),
                self._url(path),
                auth=self.auth if any(self.auth) else None,
                headers=self.headers,
                timeout=effective_timeout,
                **kwargs,
            )
        except requests.Timeout as exc:
            raise ItsDependencyTimeout(f"ITS {method.upper()} {path} timed out after {effective_timeout}s") from exc
        except requests.RequestException as exc:
            raise ItsDependencyUnavailable(f"ITS {method.upper()} {path} request failed: {exc}") from exc

    def check_permissions(self) -> bool:
        """Health check: verifies credentials and basic read access."""
        if not self.base_url:
            return False
        try:
            resp = self._request("GET", "/rest/api/2/myself", timeout=min(self.default_timeout_seconds, 5))
            return resp.status_code == 200
        except ItsClientError:
            return False

    def exists(self, issue_id: str) -> bool:
        resp = self._request(
            "GET",
            f"/rest/api/2/issue/{requests.utils.quote(issue_id, safe='')}",
            params={"fields": "key"},
        )
        if resp.status_code == 200:
            return True
        if resp.status_code == 404:
            return False
        raise ItsDependencyUnavailable(
            f"ITS issue lookup failed with status {resp.status_code} for {issue_id}"
        )
