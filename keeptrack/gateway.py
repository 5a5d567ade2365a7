"""
Remote data gateway: project CRUD against the KeepTrack REST API.

    GET /projects?_sort=order   → list of projects
    GET /projects/{id}          → one project
    PUT /projects/{id}          → full replace, returns the stored record

Authentication is the session cookie carried by the requests.Session; the
gateway never touches credentials. Nothing here retries.
"""
import logging
from typing import Callable, List, Optional

import requests

from .errors import (
    Failure,
    KeepTrackError,
    RemoteError,
    Success,
    TransportError,
)
from .schema import Project

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:4000"
DEFAULT_TIMEOUT = 10

RETRIEVE_FAILED = "There was an error retrieving the project(s). Please try again."
RETRIEVE_TRANSPORT_FAILED = "There was an error retrieving the projects. Please try again."
UPDATE_FAILED = "There was an error updating the project. Please try again."


def translate_status_to_error_message(status_code: int, default: str = RETRIEVE_FAILED) -> str:
    """User-facing message for an HTTP error status."""
    if status_code == 401:
        return "Please login again."
    if status_code == 403:
        return "You do not have permission to view the project(s)."
    return default


class ProjectGateway:
    """Fetch/update projects over HTTP."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.url = f"{self.base_url}/projects"
        self.session = session or requests.Session()
        self.timeout = timeout

    # ── transport ──────────────────────────────

    def _request(self, method: str, url: str, error_message: str,
                 transport_message: str, **kwargs):
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning(f"{method} {url} failed without a response: {e}")
            raise TransportError(transport_message) from e

        if not response.ok:
            logger.warning(
                f"server http error: status={response.status_code} "
                f"reason={response.reason} url={response.url}"
            )
            raise RemoteError(
                translate_status_to_error_message(response.status_code, error_message),
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"{method} {url} returned an unreadable body: {e}")
            raise RemoteError(error_message, status_code=response.status_code) from e

    # ── operations ─────────────────────────────

    def fetch_all(self) -> List[Project]:
        """All projects, ascending by order."""
        data = self._request(
            "GET", self.url, RETRIEVE_FAILED, RETRIEVE_TRANSPORT_FAILED,
            params={"_sort": "order"},
        )
        if not isinstance(data, list):
            raise RemoteError(RETRIEVE_FAILED)
        return [Project.from_dict(item) for item in data if isinstance(item, dict)]

    def fetch_one(self, project_id: int) -> Project:
        data = self._request(
            "GET", f"{self.url}/{int(project_id)}",
            RETRIEVE_FAILED, RETRIEVE_TRANSPORT_FAILED,
        )
        if not isinstance(data, dict):
            raise RemoteError(RETRIEVE_FAILED)
        return Project.from_dict(data)

    def update(self, project: Project) -> Project:
        """
        Send a full replace-style update.

        Raises ValidationError before any request if the status is unknown
        or the id is missing. Name and budget are not checked here; records
        the server already holds are sent back as they are.
        """
        project_id = project.require_id()
        try:
            project.validate()
        except KeepTrackError as e:
            logger.error(f"Validation error for project {project_id}: {e}")
            raise

        data = self._request(
            "PUT", f"{self.url}/{project_id}", UPDATE_FAILED, UPDATE_FAILED,
            json=project.to_dict(),
        )
        if not isinstance(data, dict):
            raise RemoteError(UPDATE_FAILED)
        return Project.from_dict(data)

    # ── tagged-result variants ─────────────────

    def _attempt(self, fn: Callable, *args):
        try:
            return Success(fn(*args))
        except KeepTrackError as e:
            return Failure(e)

    def try_fetch_all(self):
        return self._attempt(self.fetch_all)

    def try_fetch_one(self, project_id: int):
        return self._attempt(self.fetch_one, project_id)

    def try_update(self, project: Project):
        return self._attempt(self.update, project)
