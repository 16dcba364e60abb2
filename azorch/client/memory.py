"""
In-memory Azkaban client.

Implements the AzkabanClient protocol without a server. Used for dry runs
(azorch deploy --dry-run) and tests. Every protocol call is appended to
`calls` as (method, project_name).

Like a real Azkaban server, a deleted project keeps its name: creating it
again answers "Project already exists." while looking it up fails.
"""

import itertools
import threading
from dataclasses import dataclass, field
from typing import Optional

from azorch.client.result import PROJECT_EXISTS_MESSAGE
from azorch.errors import AzkabanApiError, SessionExpiredError
from azorch.payload import build_project_zip
from azorch.schemas import AzkabanProjectConfig


@dataclass
class StoredProject:
    """State of one project held by the in-memory server."""
    project_id: str
    name: str
    description: str
    deleted: bool = False
    uploads: list[bytes] = field(default_factory=list)
    flow_name: Optional[str] = None
    schedule_cron: Optional[str] = None
    user_to_proxy: Optional[str] = None
    group_admin_users: tuple[str, ...] = ()

    @property
    def version(self) -> int:
        return len(self.uploads)


class InMemoryAzkabanClient:
    """AzkabanClient implementation that keeps projects in a dict."""

    def __init__(self, users: Optional[dict[str, str]] = None):
        """
        Args:
            users: username -> password accepted by authenticate. None
                accepts any credentials.
        """
        self.users = users
        self.projects: dict[str, StoredProject] = {}
        self.calls: list[tuple[str, str]] = []
        self._sessions: set[str] = set()
        self._session_ids = itertools.count(1)
        self._project_ids = itertools.count(1)
        self._failures: dict[str, AzkabanApiError] = {}
        self._lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Test controls
    # -------------------------------------------------------------------------

    def fail_next(self, method: str, error: AzkabanApiError) -> None:
        """Make the next call to method raise error."""
        self._failures[method] = error

    def expire_sessions(self) -> None:
        """Invalidate every session handed out so far."""
        with self._lock:
            self._sessions.clear()

    def delete_project(self, name: str) -> None:
        """Mark a project deleted. Its name stays taken."""
        with self._lock:
            self.projects[name].deleted = True

    def calls_for(self, project_name: str) -> list[str]:
        """Method names called for one project, in order."""
        return [method for method, name in self.calls if name == project_name]

    # -------------------------------------------------------------------------
    # AzkabanClient protocol
    # -------------------------------------------------------------------------

    def authenticate(self, username: str, password: str, server_url: str) -> str:
        self._record("authenticate", username)
        if self.users is not None and self.users.get(username) != password:
            raise AzkabanApiError("Incorrect Login. Username/Password not found.")
        session_id = f"session-{next(self._session_ids)}"
        with self._lock:
            self._sessions.add(session_id)
        return session_id

    def create_project(self, session_id: str, project: AzkabanProjectConfig) -> None:
        self._enter("create_project", session_id, project)
        with self._lock:
            if project.project_name in self.projects:
                raise AzkabanApiError(PROJECT_EXISTS_MESSAGE)
            self.projects[project.project_name] = StoredProject(
                project_id=str(next(self._project_ids)),
                name=project.project_name,
                description=project.description,
            )

    def add_proxy_user(self, session_id: str, project: AzkabanProjectConfig) -> None:
        self._enter("add_proxy_user", session_id, project)
        self._live_project(project.project_name).user_to_proxy = project.user_to_proxy

    def add_group_admin(self, session_id: str, project: AzkabanProjectConfig, group: str) -> None:
        self._enter("add_group_admin", session_id, project)
        stored = self._live_project(project.project_name)
        if group not in stored.group_admin_users:
            stored.group_admin_users += (group,)

    def get_project_id(self, session_id: str, project: AzkabanProjectConfig) -> str:
        self._enter("get_project_id", session_id, project)
        return self._live_project(project.project_name).project_id

    def upload_job(
        self,
        session_id: str,
        project_id: Optional[str],
        project: AzkabanProjectConfig,
    ) -> Optional[str]:
        self._enter("upload_job", session_id, project)
        stored = self._live_project(project.project_name)
        stored.uploads.append(build_project_zip(project))
        return stored.project_id

    def replace_job(self, session_id: str, project_id: str, project: AzkabanProjectConfig) -> None:
        self._enter("replace_job", session_id, project)
        stored = self._live_project(project.project_name)
        stored.uploads.append(build_project_zip(project))

    def schedule_job(self, session_id: str, project_id: Optional[str], project: AzkabanProjectConfig) -> None:
        self._enter("schedule_job", session_id, project)
        self._set_schedule(project)

    def change_schedule(self, session_id: str, project_id: str, project: AzkabanProjectConfig) -> None:
        self._enter("change_schedule", session_id, project)
        self._set_schedule(project)

    def close(self) -> None:
        pass

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _record(self, method: str, name: str) -> None:
        with self._lock:
            self.calls.append((method, name))

    def _enter(self, method: str, session_id: str, project: AzkabanProjectConfig) -> None:
        self._record(method, project.project_name)
        if session_id not in self._sessions:
            raise SessionExpiredError("Azkaban session expired")
        error = self._failures.pop(method, None)
        if error is not None:
            raise error

    def _live_project(self, name: str) -> StoredProject:
        stored = self.projects.get(name)
        if stored is None or stored.deleted:
            raise AzkabanApiError(f"Project {name} doesn't exist.")
        return stored

    def _set_schedule(self, project: AzkabanProjectConfig) -> None:
        stored = self._live_project(project.project_name)
        if stored.version == 0:
            raise AzkabanApiError(f"Flow {project.flow_name} cannot be found in project {project.project_name}")
        stored.flow_name = project.flow_name
        stored.schedule_cron = project.schedule_cron
