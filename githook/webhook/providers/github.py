"""
GitHub webhook client.
"""
from typing import Any, Dict, Optional

from github import Auth, Github, GithubException, UnknownObjectException
from github.Hook import Hook
from github.Repository import Repository

from ...errors import HookIDRequiredError, ProviderAPIError
from ..models import HookOptions, events_changed
from .base import GitClient, numeric_hook_id


class GitHubClient(GitClient):
    """Manages repository webhooks through the GitHub REST API."""

    HOOK_NAME = "web"
    PUBLIC_URL = "https://github.com"

    def __init__(self, base_url: str, access_token: str, github: Optional[Github] = None):
        if github is None:
            auth = Auth.Token(access_token)
            base_url = base_url.rstrip("/")
            if base_url == self.PUBLIC_URL:
                github = Github(auth=auth)
            else:
                # GitHub Enterprise serves the REST API under /api/v3
                github = Github(base_url=f"{base_url}/api/v3", auth=auth)
        self.github = github

    def close(self) -> None:
        self.github.close()

    def _repo(self, options: HookOptions) -> Repository:
        return self.github.get_repo(options.full_name, lazy=True)

    def _config(self, options: HookOptions) -> Dict[str, Any]:
        return {
            "content_type": "json",
            "url": options.url,
            "secret": options.secret_token,
            "insecure_ssl": "0" if options.ssl_verify else "1",
        }

    def _get_hook(self, options: HookOptions) -> Optional[Hook]:
        hook_id = numeric_hook_id(options)
        try:
            return self._repo(options).get_hook(hook_id)
        except UnknownObjectException:
            return None
        except GithubException as e:
            raise ProviderAPIError("get", options.project, e) from e

    def validate(self, options: HookOptions) -> tuple[bool, bool]:
        if not options.id:
            return False, False

        hook = self._get_hook(options)
        if hook is None:
            return False, False

        if hook.config.get("url") != options.url:
            return True, True

        return True, events_changed(hook.events, options.events)

    def create(self, options: HookOptions) -> str:
        try:
            hook = self._repo(options).create_hook(
                self.HOOK_NAME,
                self._config(options),
                events=list(options.events),
                active=True,
            )
        except GithubException as e:
            raise ProviderAPIError("add", options.project, e) from e

        return str(hook.id)

    def update(self, options: HookOptions) -> str:
        if not options.id:
            raise HookIDRequiredError()

        hook_id = numeric_hook_id(options)
        try:
            hook = self._repo(options).get_hook(hook_id)
            hook.edit(
                self.HOOK_NAME,
                self._config(options),
                events=list(options.events),
                active=True,
            )
        except GithubException as e:
            raise ProviderAPIError("update", options.project, e) from e

        return str(hook.id)

    def delete(self, options: HookOptions) -> None:
        if not options.id:
            return

        hook_id = numeric_hook_id(options)
        try:
            self._repo(options).get_hook(hook_id).delete()
        except UnknownObjectException:
            return
        except GithubException as e:
            raise ProviderAPIError("delete", options.project, e) from e
