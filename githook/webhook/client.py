"""
Uniform webhook client over the provider implementations.
"""
from ..errors import UnsupportedProviderError
from ..models import GitProvider
from .models import HookOptions
from .providers import GitClient, GitHubClient, GitLabClient, GogsClient


class GitClientFactory:
    """Factory for creating provider clients."""

    _clients = {
        GitProvider.GITHUB: GitHubClient,
        GitProvider.GITLAB: GitLabClient,
        GitProvider.GOGS: GogsClient,
    }

    @classmethod
    def create(cls, provider: str, base_url: str, access_token: str) -> GitClient:
        """Create the client for the given provider type."""
        try:
            provider_type = GitProvider(provider)
        except ValueError:
            raise UnsupportedProviderError(provider)
        return cls._clients[provider_type](base_url, access_token)


class GitHookClient:
    """Webhook operations independent of the git provider."""

    def __init__(self, git_client: GitClient):
        self.git_client = git_client

    @classmethod
    def for_provider(cls, provider: str, options: HookOptions) -> "GitHookClient":
        return cls(GitClientFactory.create(provider, options.base_url, options.access_token))

    def validate(self, options: HookOptions) -> tuple[bool, bool]:
        return self.git_client.validate(options)

    def create(self, options: HookOptions) -> str:
        return self.git_client.create(options)

    def update(self, options: HookOptions) -> str:
        return self.git_client.update(options)

    def delete(self, options: HookOptions) -> None:
        self.git_client.delete(options)

    def close(self) -> None:
        self.git_client.close()
