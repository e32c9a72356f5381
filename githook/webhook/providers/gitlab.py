"""
GitLab webhook client.

GitLab describes subscriptions as boolean flags on the hook instead of a list
of event names, so canonical events are translated in both directions.
"""
from typing import Any, Dict, Optional

import gitlab
from gitlab.exceptions import GitlabError
from gitlab.v4.objects import Project, ProjectHook

from ...errors import HookIDRequiredError, ProviderAPIError, UnsupportedEventError
from ...models import GitEvent
from ..models import HookOptions, events_changed
from .base import GitClient, numeric_hook_id

EVENT_FLAGS: Dict[str, tuple[str, ...]] = {
    GitEvent.PUSH.value: ("push_events", "tag_push_events"),
    GitEvent.ISSUES.value: ("issues_events",),
    GitEvent.ISSUE_COMMENT.value: ("note_events",),
    GitEvent.PULL_REQUEST.value: ("merge_requests_events",),
    GitEvent.RELEASE.value: ("releases_events",),
}

ALL_FLAGS = tuple(flag for flags in EVENT_FLAGS.values() for flag in flags)


def hook_to_events(hook: ProjectHook) -> list[str]:
    """Canonical events a GitLab hook is subscribed to."""
    return [
        event
        for event, flags in EVENT_FLAGS.items()
        if any(getattr(hook, flag, False) for flag in flags)
    ]


def events_to_flags(events: list[str]) -> Dict[str, bool]:
    """GitLab hook flags for a set of canonical events.

    Every known flag is present so that an edit also switches events off.
    """
    unsupported = [event for event in events if event not in EVENT_FLAGS]
    if unsupported:
        raise UnsupportedEventError("gitlab", unsupported)

    flags = {flag: False for flag in ALL_FLAGS}
    for event in events:
        for flag in EVENT_FLAGS[event]:
            flags[flag] = True
    return flags


class GitLabClient(GitClient):
    """Manages project webhooks through the GitLab REST API."""

    def __init__(self, base_url: str, access_token: str, client: Optional[gitlab.Gitlab] = None):
        self.gitlab = client or gitlab.Gitlab(url=base_url, private_token=access_token)

    def close(self) -> None:
        self.gitlab.session.close()

    def _project(self, options: HookOptions) -> Project:
        return self.gitlab.projects.get(options.full_name, lazy=True)

    def _hook_data(self, options: HookOptions) -> Dict[str, Any]:
        return {
            "url": options.url,
            "token": options.secret_token,
            "enable_ssl_verification": options.ssl_verify,
            **events_to_flags(options.events),
        }

    def _get_hook(self, options: HookOptions) -> Optional[ProjectHook]:
        hook_id = numeric_hook_id(options)
        try:
            return self._project(options).hooks.get(hook_id)
        except GitlabError as e:
            if e.response_code == 404:
                return None
            raise ProviderAPIError("get", options.project, e) from e

    def validate(self, options: HookOptions) -> tuple[bool, bool]:
        if not options.id:
            return False, False

        hook = self._get_hook(options)
        if hook is None:
            return False, False

        if hook.url != options.url:
            return True, True

        return True, events_changed(hook_to_events(hook), options.events)

    def create(self, options: HookOptions) -> str:
        data = self._hook_data(options)
        try:
            hook = self._project(options).hooks.create(data)
        except GitlabError as e:
            raise ProviderAPIError("add", options.project, e) from e

        return str(hook.id)

    def update(self, options: HookOptions) -> str:
        if not options.id:
            raise HookIDRequiredError()

        hook_id = numeric_hook_id(options)
        data = self._hook_data(options)
        try:
            self._project(options).hooks.update(hook_id, data)
        except GitlabError as e:
            raise ProviderAPIError("update", options.project, e) from e

        return str(hook_id)

    def delete(self, options: HookOptions) -> None:
        if not options.id:
            return

        hook_id = numeric_hook_id(options)
        try:
            self._project(options).hooks.delete(hook_id)
        except GitlabError as e:
            if e.response_code == 404:
                return
            raise ProviderAPIError("delete", options.project, e) from e
