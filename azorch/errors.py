"""
Error classes for azorch deployments.

Errors raised while mirroring a spec onto Azkaban fall in three groups:
- Construction errors: AuthenticationError aborts the producer
- Input errors: SpecTypeError for a spec variant the producer cannot deploy
- Remote errors: raised by the Azkaban client, then wrapped in DeploymentError
  before they reach the caller

The "Project already exists." conflict is not an error here. The client
boundary reports it as a tagged CallResult (see azorch.client.result).

UnsupportedOperationError is deliberately outside the DeploymentError branch
so callers can tell "never implemented" apart from "failed this time".
"""


class AzorchError(Exception):
    """Base exception for azorch."""
    pass


class AuthenticationError(AzorchError):
    """
    Authentication with the Azkaban server failed.

    Fatal: the producer cannot be constructed without a session.
    """
    pass


class SpecTypeError(AzorchError, TypeError):
    """The supplied spec is not a JobSpec, or its config is malformed."""
    pass


class AzkabanApiError(AzorchError):
    """
    Azkaban answered a request with an error.

    The message is the text Azkaban returned, unchanged. The conflict check
    in azorch.client.result relies on that.
    """

    def __init__(self, message: str, response: dict | None = None):
        super().__init__(message)
        self.message = message
        self.response = response or {}


class SessionExpiredError(AzkabanApiError):
    """The session id was rejected. The producer renews once and retries."""
    pass


class AzkabanTransportError(AzkabanApiError):
    """The HTTP request to Azkaban failed (timeout, connection, bad status)."""
    pass


class RemoteLookupError(AzorchError):
    """Could not resolve the id of an existing project."""
    pass


class RemoteWriteError(AzorchError):
    """Replacing the project payload or changing its schedule failed."""
    pass


class DeploymentError(AzorchError):
    """
    A deployment operation failed.

    Wraps the underlying cause (available as __cause__). Not retried by the
    producer.
    """
    pass


class UnsupportedOperationError(AzorchError, NotImplementedError):
    """The producer does not implement this operation."""
    pass
