import logging
import os
from http.cookiejar import DefaultCookiePolicy
from logging import getLogger
from typing import Any, Optional, TypeVar

import requests
from pydantic import ValidationError

from src.models import ClockodoModel, Entry, EntriesPage, Project, ProjectsPage, User, UsersPage

DEFAULT_BASE_URL = "https://my.clockodo.com/api"
DEFAULT_TIMEOUT = 30.0
EXTERNAL_APPLICATION = "mcp-python"

PageT = TypeVar("PageT", bound=ClockodoModel)


class ClockodoClientException(Exception):
    pass


class ConfigurationError(ClockodoClientException):
    def __init__(self, message: str, missing: Optional[list[str]] = None) -> None:
        self.missing = missing or []
        super().__init__(message)


class TransportError(ClockodoClientException):
    def __init__(self, path: str, error: Exception) -> None:
        self.path = path
        super().__init__(f"Request to {path} failed: {type(error).__name__}: {error}")


class RemoteHttpError(ClockodoClientException):
    def __init__(self, path: str, status: int, reason: str) -> None:
        self.path = path
        self.status = status
        self.reason = reason
        super().__init__(f"HTTP {status}: {reason}")


class ResponseShapeError(ClockodoClientException):
    """The response body does not match the expected schema.

    ``issues`` holds every problem pydantic found, not only the first one,
    so a schema drift on the remote side can be diagnosed in one go.
    """

    def __init__(self, path: str, issues: list[dict[str, Any]]) -> None:
        self.path = path
        self.issues = issues
        details = "; ".join(
            f"{'.'.join(str(part) for part in issue['loc']) or '<body>'}: {issue['msg']}"
            for issue in issues
        )
        super().__init__(f"Invalid API response format from {path} ({len(issues)} issues): {details}")


class RetrievalError(ClockodoClientException):
    def __init__(self, resource: str, cause: ClockodoClientException) -> None:
        self.resource = resource
        self.cause = cause
        super().__init__(f"Failed to fetch {resource} from remote API: {cause}")


class ClockodoClient:
    def __init__(
        self,
        email=None,
        api_key=None,
        base_url=None,
        timeout=None,
        debug=False,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._email = email or os.environ.get("CLOCKODO_EMAIL", "")
        self._api_key = api_key or os.environ.get("CLOCKODO_API_KEY", "")

        missing = []
        if not self._email:
            missing.append("CLOCKODO_EMAIL")
        if not self._api_key:
            missing.append("CLOCKODO_API_KEY")
        if missing:
            raise ConfigurationError(f"{' and '.join(missing)} environment variables are required", missing)

        self._base_url = (base_url or os.environ.get("CLOCKODO_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
        timeout = timeout or os.environ.get("CLOCKODO_TIMEOUT") or DEFAULT_TIMEOUT
        try:
            self._timeout = float(timeout)
        except ValueError:
            raise ConfigurationError(f"CLOCKODO_TIMEOUT must be a number of seconds, got {timeout!r}") from None
        self._debug = debug or bool(os.environ.get("CLOCKODO_DEBUG"))
        self._logger = logger or getLogger(__name__)

        self.session = session or requests.Session()
        self._set_session_headers()
        # retrievals share the session, so no cookies are kept between them
        self.session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))
        if self._debug:
            self._logger.debug(f"Running Clockodo client with user={self._email}, base_url={self.base_url}")

    @property
    def base_url(self):
        return self._base_url

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "X-ClockodoApiUser": self._email,
            "X-ClockodoApiKey": self._api_key,
            "X-Clockodo-External-Application": EXTERNAL_APPLICATION,
        }

    def _set_session_headers(self):
        self.session.headers.update(self.headers)

    def _masked_headers(self) -> dict[str, str]:
        return {**self.headers, "X-ClockodoApiKey": "***"}

    def _get(self, path: str, schema: type[PageT], params: Optional[dict[str, Any]] = None) -> PageT:
        url = f"{self.base_url}{path}"
        if self._debug:
            self._logger.debug(f">>> GET {url} params={params} headers={self._masked_headers()}")

        try:
            response = self.session.get(url, params=params, timeout=self._timeout)
        except requests.RequestException as e:
            self._logger.error(f"Request to {path} failed: {type(e).__name__}")
            raise TransportError(path, e) from e

        if self._debug:
            self._logger.debug(f"<<< {response.status_code} {response.reason} ({len(response.content)} bytes)")

        if not 200 <= response.status_code < 300:
            self._logger.error(f"HTTP {response.status_code} {response.reason} from {path}, body: {response.text}")
            raise RemoteHttpError(path, response.status_code, response.reason)

        try:
            page = schema.model_validate_json(response.content)
        except ValidationError as e:
            issues = e.errors(include_url=False, include_input=False)
            self._logger.error(f"Response from {path} failed validation with {len(issues)} issues: {issues}")
            raise ResponseShapeError(path, issues) from e

        return page

    def _paginate(
        self, path: str, schema: type[PageT], items: str, params: Optional[dict[str, Any]] = None
    ) -> list:
        """
        Fetch every page of a paginated endpoint, one after the other.
        `items` names the envelope field holding the records; any failing page aborts the whole run.
        """
        records = []
        page = 1
        while True:
            response = self._get(path, schema, params={**(params or {}), "page": page})
            records.extend(getattr(response, items))

            paging = response.paging
            if self._debug:
                self._logger.debug(
                    f"Got page {paging.current_page}/{paging.count_pages} of {path} "
                    f"({len(records)}/{paging.count_items} records so far)"
                )
            page = max(page, paging.current_page)
            if page >= paging.count_pages:
                break
            page += 1

        return records

    def get_users(self) -> list[User]:
        try:
            return self._paginate("/v3/users", UsersPage, "data")
        except ClockodoClientException as e:
            raise RetrievalError("users", e) from e

    def get_projects(self) -> list[Project]:
        try:
            return self._paginate("/v4/projects", ProjectsPage, "data")
        except ClockodoClientException as e:
            raise RetrievalError("projects", e) from e

    def get_entries(self, user_id: int, time_since: str, time_until: str) -> list[Entry]:
        # /v2/entries cannot filter by user, so every entry in the range is fetched and filtered here
        params = {"time_since": time_since, "time_until": time_until}
        try:
            entries = self._paginate("/v2/entries", EntriesPage, "entries", params=params)
        except ClockodoClientException as e:
            raise RetrievalError("entries", e) from e

        if self._debug:
            self._logger.debug(f"Keeping entries of user {user_id} out of {len(entries)} in range")
        return [entry for entry in entries if entry.users_id == user_id]
