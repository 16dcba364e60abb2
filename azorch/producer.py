"""AzkabanSpecProducer - mirrors JobSpec lifecycle onto Azkaban projects.

The producer reconciles a spec against Azkaban:

1. add_spec: optimistically creates the project. Azkaban's own existence
   check also reports deleted projects, so the create call is the existence
   check. On "Project already exists." the spec's overwrite flag decides
   between replacing the project in place and leaving it alone.
2. update_spec: always replaces the payload and schedule of the existing
   project (lookup -> replace -> reschedule).
3. delete_spec / list_specs: not supported; raise UnsupportedOperationError
   without touching Azkaban.

Usage:
    from azorch.producer import AzkabanSpecProducer

    with AzkabanSpecProducer(config) as producer:
        result = producer.add_spec(spec).result()
        print(result.outcome, result.manager_url)
"""

import logging
from concurrent.futures import Future
from contextlib import nullcontext
from typing import Any, Callable, ContextManager, Optional

from azorch.client import AzkabanAjaxClient, AzkabanClient, CallStatus, classify
from azorch.config import AzorchConfig
from azorch.errors import (
    AuthenticationError,
    AzkabanApiError,
    DeploymentError,
    RemoteLookupError,
    RemoteWriteError,
    UnsupportedOperationError,
)
from azorch.locks import KeyedLock
from azorch.schemas import AzkabanProjectConfig, DeploymentResult, DeployOutcome, Spec
from azorch.session import Session
from azorch.translator import translate

logger = logging.getLogger(__name__)

SETUP_FAILED_MESSAGE = "Issue in setting up Azkaban project."


def completed_future(result: Any = None) -> Future:
    """Return a Future that is already resolved with result."""
    future: Future = Future()
    future.set_result(result)
    return future


class AzkabanSpecProducer:
    """
    Deploys specs as scheduled Azkaban projects.

    Authenticates once on construction. All operations block until Azkaban
    has answered and return an already-resolved Future.
    """

    def __init__(
        self,
        config: AzorchConfig,
        client: Optional[AzkabanClient] = None,
        log: Optional[logging.Logger] = None,
    ):
        """
        Initialize the producer and open the Azkaban session.

        Args:
            config: Adapter configuration (credentials, server URL, defaults)
            client: Azkaban client. Defaults to an AzkabanAjaxClient owned
                (and closed) by the producer.
            log: Logger for deployment messages. Defaults to the module logger.

        Raises:
            AuthenticationError: If Azkaban rejects the credentials
        """
        self._config = config
        self._log = log or logger
        self._owns_client = client is None
        self._client: AzkabanClient = client or AzkabanAjaxClient(timeout_s=config.http_timeout_s)
        self._defaults = config.spec_defaults()
        self._locks: Optional[KeyedLock] = KeyedLock() if config.serialize_by_name else None

        try:
            self._session = Session.open(
                self._client, config.username, config.password, config.server_url
            )
        except AuthenticationError:
            self._close_client()
            raise

    @property
    def session(self) -> Session:
        return self._session

    def describe(self, spec: Spec) -> AzkabanProjectConfig:
        """Translate a spec without contacting Azkaban."""
        return translate(spec, self._defaults)

    # -------------------------------------------------------------------------
    # Spec lifecycle
    # -------------------------------------------------------------------------

    def add_spec(self, spec: Spec) -> "Future[DeploymentResult]":
        """
        Deploy a spec, creating its project or reconciling with an existing one.

        Returns:
            Resolved Future with a DeploymentResult (CREATED, UPDATED or UNCHANGED)

        Raises:
            SpecTypeError: If spec is not a JobSpec
            DeploymentError: If Azkaban fails for any reason other than the
                project already existing
        """
        project = translate(spec, self._defaults)
        self._log.info(f"Setting up your Azkaban project for: {project.project_name}")

        with self._hold(project.project_name):
            try:
                result = self._reconcile(project)
            except (AzkabanApiError, AuthenticationError, RemoteLookupError, RemoteWriteError) as e:
                raise DeploymentError(SETUP_FAILED_MESSAGE) from e

        return completed_future(result)

    def update_spec(self, spec: Spec) -> "Future[None]":
        """
        Replace the payload and schedule of the spec's existing project.

        Never creates a project.

        Returns:
            Resolved Future with no result

        Raises:
            SpecTypeError: If spec is not a JobSpec
            DeploymentError: If lookup, replace or reschedule fails
        """
        project = translate(spec, self._defaults)

        with self._hold(project.project_name):
            try:
                self._update_existing_project(project)
            except (AuthenticationError, RemoteLookupError, RemoteWriteError) as e:
                raise DeploymentError(SETUP_FAILED_MESSAGE) from e

        return completed_future(None)

    def delete_spec(self, spec_uri: str) -> Future:
        """Not supported: Azkaban projects are never deleted by azorch."""
        raise UnsupportedOperationError(f"delete_spec is not supported (spec: {spec_uri})")

    def list_specs(self) -> Future:
        """Not supported: deployed specs cannot be listed back from Azkaban."""
        raise UnsupportedOperationError("list_specs is not supported")

    def close(self) -> None:
        """Release the HTTP client if the producer created it."""
        self._close_client()

    def __enter__(self) -> "AzkabanSpecProducer":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------------

    def _reconcile(self, project: AzkabanProjectConfig) -> DeploymentResult:
        created = classify(lambda: self._session.call(self._client.create_project, project))

        if created.status is CallStatus.SUCCESS:
            project_id = self._create_new_project(project)
            return DeploymentResult(project.project_name, project.manager_url, DeployOutcome.CREATED, project_id)

        if created.status is CallStatus.CONFLICT:
            if project.overwrite_if_exists:
                self._log.info("Project already exists for this spec, but force overwrite specified")
                project_id = self._update_existing_project(project)
                return DeploymentResult(project.project_name, project.manager_url, DeployOutcome.UPDATED, project_id)

            self._log.info(f"Azkaban project already exists: {project.manager_url}")
            return DeploymentResult(project.project_name, project.manager_url, DeployOutcome.UNCHANGED)

        raise created.error

    def _create_new_project(self, project: AzkabanProjectConfig) -> Optional[str]:
        self._grant_access(project)
        project_id = self._write("upload", project, self._client.upload_job, None, project)
        self._write("schedule", project, self._client.schedule_job, project_id, project)
        self._log.info(f"Azkaban project created: {project.manager_url}")
        return project_id

    def _grant_access(self, project: AzkabanProjectConfig) -> None:
        # One request per grant; a session renewal retries only that grant
        if project.user_to_proxy:
            self._write("addProxyUser", project, self._client.add_proxy_user, project)
        for group in project.group_admin_users:
            self._write("addPermission", project, self._client.add_group_admin, project, group)

    def _update_existing_project(self, project: AzkabanProjectConfig) -> str:
        self._log.info(f"Updating project: {project.manager_url}")

        try:
            project_id = self._session.call(self._client.get_project_id, project)
        except AzkabanApiError as e:
            raise RemoteLookupError(
                f"Could not resolve project id for {project.project_name}: {e}"
            ) from e

        # Payload first: the schedule refers to the uploaded flow
        self._write("replace", project, self._client.replace_job, project_id, project)
        self._write("reschedule", project, self._client.change_schedule, project_id, project)
        return project_id

    def _write(self, step: str, project: AzkabanProjectConfig, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return self._session.call(fn, *args)
        except AzkabanApiError as e:
            raise RemoteWriteError(f"Azkaban {step} failed for {project.project_name}: {e}") from e

    def _hold(self, name: str) -> ContextManager[Any]:
        if self._locks is None:
            return nullcontext()
        return self._locks.hold(name)

    def _close_client(self) -> None:
        if self._owns_client:
            self._client.close()
