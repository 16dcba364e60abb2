"""
Azkaban client interface.

This module defines the protocol any Azkaban client must implement, so the
producer stays decoupled from the transport.

Implementations:
- AzkabanAjaxClient: Real implementation over Azkaban's AJAX API (httpx)
- InMemoryAzkabanClient: For dry runs and testing

Every method except authenticate takes the session id first and sends a
single request, so a call can be retried after a session renewal. Failures are
raised as AzkabanApiError (SessionExpiredError when the session id is
rejected, AzkabanTransportError when the request itself fails).
"""

from typing import Optional, Protocol, runtime_checkable

from azorch.schemas import AzkabanProjectConfig


@runtime_checkable
class AzkabanClient(Protocol):
    """Protocol for project operations against an Azkaban server."""

    def authenticate(self, username: str, password: str, server_url: str) -> str:
        """
        Log in and return a session id.

        Raises:
            AzkabanApiError: If the server rejects the credentials
        """
        ...

    def create_project(self, session_id: str, project: AzkabanProjectConfig) -> None:
        """
        Create an empty project.

        Raises:
            AzkabanApiError: With message "Project already exists." when the
                name is taken, including by a previously deleted project
        """
        ...

    def add_proxy_user(self, session_id: str, project: AzkabanProjectConfig) -> None:
        """Allow the project's flows to run as project.user_to_proxy."""
        ...

    def add_group_admin(self, session_id: str, project: AzkabanProjectConfig, group: str) -> None:
        """Grant a group admin permission on the project."""
        ...

    def get_project_id(self, session_id: str, project: AzkabanProjectConfig) -> str:
        """Resolve the id of an existing project."""
        ...

    def upload_job(
        self,
        session_id: str,
        project_id: Optional[str],
        project: AzkabanProjectConfig,
    ) -> Optional[str]:
        """
        Upload the job payload of a freshly created project.

        Returns:
            The project id reported by the server, if any
        """
        ...

    def replace_job(self, session_id: str, project_id: str, project: AzkabanProjectConfig) -> None:
        """Replace the job payload of an existing project."""
        ...

    def schedule_job(self, session_id: str, project_id: Optional[str], project: AzkabanProjectConfig) -> None:
        """Register the cron schedule of a freshly uploaded flow."""
        ...

    def change_schedule(self, session_id: str, project_id: str, project: AzkabanProjectConfig) -> None:
        """Replace the cron schedule of an existing flow."""
        ...

    def close(self) -> None:
        """Release transport resources."""
        ...
