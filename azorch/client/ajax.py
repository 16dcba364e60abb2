"""
Azkaban AJAX API client.

Talks to the Azkaban web server over its AJAX endpoints:

- POST /                   action=login
- POST /manager            action=create
- GET  /manager            ajax=fetchprojectflows
- POST /manager            ajax=upload (multipart zip)
- GET  /manager            ajax=addProxyUser, ajax=addPermission
- POST /schedule           ajax=scheduleCronFlow

Azkaban reports failures inside a 200 response, either as {"error": "..."}
or as {"status": "error", "message": "..."}. Both become AzkabanApiError
carrying the server's message unchanged. {"error": "session"} means the
session id is no longer valid and becomes SessionExpiredError.
"""

import logging
from typing import Any, Optional

import httpx

from azorch.config import DEFAULT_HTTP_TIMEOUT_S
from azorch.errors import AzkabanApiError, AzkabanTransportError, SessionExpiredError
from azorch.payload import build_project_zip
from azorch.schemas import AzkabanProjectConfig

logger = logging.getLogger(__name__)

SESSION_PARAM = "session.id"


def _endpoint(server_url: str, path: str = "") -> str:
    return f"{server_url.rstrip('/')}/{path}"


class AzkabanAjaxClient:
    """AzkabanClient implementation backed by httpx."""

    def __init__(
        self,
        http_client: Optional[httpx.Client] = None,
        timeout_s: float = DEFAULT_HTTP_TIMEOUT_S,
    ):
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(
            timeout=httpx.Timeout(timeout_s),
            headers={
                "Accept": "application/json",
                "X-Requested-With": "XMLHttpRequest",
            },
        )

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = self._http.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise AzkabanTransportError(
                f"Azkaban returned HTTP {e.response.status_code} for {url}"
            ) from e
        except httpx.HTTPError as e:
            raise AzkabanTransportError(f"Request to {url} failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise AzkabanApiError(f"Azkaban returned a non-JSON response for {url}") from e

        if not isinstance(data, dict):
            raise AzkabanApiError(f"Azkaban returned an unexpected response for {url}")

        return self._check(data)

    @staticmethod
    def _check(data: dict[str, Any]) -> dict[str, Any]:
        error = data.get("error")
        if error == "session":
            raise SessionExpiredError("Azkaban session expired", data)
        if error:
            raise AzkabanApiError(str(error), data)
        if data.get("status") == "error":
            raise AzkabanApiError(str(data.get("message") or "Unknown Azkaban error"), data)
        return data

    # -------------------------------------------------------------------------
    # AzkabanClient protocol
    # -------------------------------------------------------------------------

    def authenticate(self, username: str, password: str, server_url: str) -> str:
        data = self._request(
            "POST",
            _endpoint(server_url),
            data={"action": "login", "username": username, "password": password},
        )
        session_id = data.get(SESSION_PARAM)
        if not session_id:
            raise AzkabanApiError("Azkaban login response has no session.id", data)
        return str(session_id)

    def create_project(self, session_id: str, project: AzkabanProjectConfig) -> None:
        self._request(
            "POST",
            _endpoint(project.server_url, "manager"),
            data={
                "action": "create",
                "name": project.project_name,
                "description": project.description,
                SESSION_PARAM: session_id,
            },
        )
        logger.debug(f"Created empty project {project.project_name}")

    def add_proxy_user(self, session_id: str, project: AzkabanProjectConfig) -> None:
        self._request(
            "GET",
            _endpoint(project.server_url, "manager"),
            params={
                "ajax": "addProxyUser",
                "project": project.project_name,
                "name": project.user_to_proxy,
                SESSION_PARAM: session_id,
            },
        )

    def add_group_admin(self, session_id: str, project: AzkabanProjectConfig, group: str) -> None:
        self._request(
            "GET",
            _endpoint(project.server_url, "manager"),
            params={
                "ajax": "addPermission",
                "project": project.project_name,
                "name": group,
                "group": "true",
                "permissions[admin]": "true",
                SESSION_PARAM: session_id,
            },
        )

    def get_project_id(self, session_id: str, project: AzkabanProjectConfig) -> str:
        data = self._request(
            "GET",
            _endpoint(project.server_url, "manager"),
            params={
                "ajax": "fetchprojectflows",
                "project": project.project_name,
                SESSION_PARAM: session_id,
            },
        )
        project_id = data.get("projectId")
        if project_id is None:
            raise AzkabanApiError(f"No projectId returned for project {project.project_name}", data)
        return str(project_id)

    def upload_job(
        self,
        session_id: str,
        project_id: Optional[str],
        project: AzkabanProjectConfig,
    ) -> Optional[str]:
        data = self._upload(session_id, project)
        uploaded_id = data.get("projectId", project_id)
        return None if uploaded_id is None else str(uploaded_id)

    def replace_job(self, session_id: str, project_id: str, project: AzkabanProjectConfig) -> None:
        # Azkaban keeps every upload as a new project version; the latest wins
        self._upload(session_id, project)

    def schedule_job(self, session_id: str, project_id: Optional[str], project: AzkabanProjectConfig) -> None:
        self._schedule(session_id, project)

    def change_schedule(self, session_id: str, project_id: str, project: AzkabanProjectConfig) -> None:
        # scheduleCronFlow replaces the existing schedule of the same flow
        self._schedule(session_id, project)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _upload(self, session_id: str, project: AzkabanProjectConfig) -> dict[str, Any]:
        archive = build_project_zip(project)
        data = self._request(
            "POST",
            _endpoint(project.server_url, "manager"),
            data={
                "ajax": "upload",
                "project": project.project_name,
                SESSION_PARAM: session_id,
            },
            files={"file": (f"{project.project_name}.zip", archive, "application/zip")},
        )
        logger.debug(
            f"Uploaded {len(archive)} bytes to {project.project_name} "
            f"(version {data.get('version', '?')})"
        )
        return data

    def _schedule(self, session_id: str, project: AzkabanProjectConfig) -> None:
        self._request(
            "POST",
            _endpoint(project.server_url, "schedule"),
            data={
                "ajax": "scheduleCronFlow",
                "projectName": project.project_name,
                "flow": project.flow_name,
                "cronExpression": project.schedule_cron,
                SESSION_PARAM: session_id,
            },
        )
        logger.debug(
            f"Scheduled {project.project_name}/{project.flow_name} with '{project.schedule_cron}'"
        )
