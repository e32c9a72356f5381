"""
Error hierarchy for the GitHook controller.

Configuration errors need a change to the GitHook before a retry can succeed.
Remote errors are transient and are retried on the next reconciliation pass.
"""


class GitHookError(Exception):
    """Base class for all controller errors."""


class ConfigurationError(GitHookError):
    """The declared GitHook cannot be converged as written."""


class UnsupportedProviderError(ConfigurationError):
    def __init__(self, provider: str):
        super().__init__(f"git provider {provider!r} is not supported")
        self.provider = provider


class InvalidProjectURLError(ConfigurationError):
    def __init__(self, project_url: str, reason: str):
        super().__init__(f"invalid project url {project_url!r}: {reason}")
        self.project_url = project_url


class SecretNotFoundError(ConfigurationError):
    def __init__(self, namespace: str, name: str, key: str):
        super().__init__(f'key "{key}" not found in secret "{namespace}/{name}"')
        self.namespace = namespace
        self.name = name
        self.key = key


class UnsupportedEventError(ConfigurationError):
    def __init__(self, provider: str, events: list[str]):
        super().__init__(
            f"events {sorted(events)} are not supported by git provider {provider!r}"
        )
        self.provider = provider
        self.events = events


class InvalidResourceError(ConfigurationError):
    """A stored object could not be parsed into the expected model."""


class HookIDRequiredError(GitHookError):
    def __init__(self):
        super().__init__("webhook id is required to be updated")


class ReceiverNotReadyError(GitHookError):
    def __init__(self, namespace: str, name: str, attempts: int):
        super().__init__(
            f"receiver service for {namespace}/{name} not ready after {attempts} attempts"
        )
        self.attempts = attempts


class PipelineTemplateError(GitHookError):
    """The pipeline run template is not a valid JSON document."""


class RemoteError(GitHookError):
    """A call to an external system failed."""


class ProviderAPIError(RemoteError):
    def __init__(self, action: str, project: str, cause: object):
        super().__init__(f"failed to {action} webhook for project {project}: {cause}")
        self.action = action
        self.project = project


class PlatformError(RemoteError):
    """Kubernetes, Knative or Tekton API failure."""
