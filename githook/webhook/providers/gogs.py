"""
Gogs webhook client.
"""
from typing import Any, Dict, Optional

import httpx

from ...errors import HookIDRequiredError, ProviderAPIError
from ..models import HookOptions, events_changed
from .base import GitClient, numeric_hook_id


class GogsClient(GitClient):
    """Manages repository webhooks through the Gogs REST API."""

    HOOK_TYPE = "gogs"

    def __init__(self, base_url: str, access_token: str, client: Optional[httpx.Client] = None):
        self.client = client or httpx.Client(
            base_url=f"{base_url.rstrip('/')}/api/v1",
            headers={"Authorization": f"token {access_token}"},
        )

    def close(self) -> None:
        self.client.close()

    def _hooks_path(self, options: HookOptions) -> str:
        return f"/repos/{options.owner}/{options.project}/hooks"

    def _hook_body(self, options: HookOptions) -> Dict[str, Any]:
        return {
            "active": True,
            "config": {
                "content_type": "json",
                "url": options.url,
                "secret": options.secret_token,
            },
            "events": list(options.events),
        }

    def _get_hook(self, options: HookOptions) -> Optional[Dict[str, Any]]:
        # Gogs has no endpoint for a single hook
        hook_id = numeric_hook_id(options)
        try:
            response = self.client.get(self._hooks_path(options))
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ProviderAPIError("list", options.project, e) from e

        for hook in response.json():
            if hook.get("id") == hook_id:
                return hook
        return None

    def validate(self, options: HookOptions) -> tuple[bool, bool]:
        if not options.id:
            return False, False

        hook = self._get_hook(options)
        if hook is None:
            return False, False

        if hook.get("config", {}).get("url") != options.url:
            return True, True

        return True, events_changed(hook.get("events") or [], options.events)

    def create(self, options: HookOptions) -> str:
        body = {"type": self.HOOK_TYPE, **self._hook_body(options)}
        try:
            response = self.client.post(self._hooks_path(options), json=body)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ProviderAPIError("add", options.project, e) from e

        return str(response.json()["id"])

    def update(self, options: HookOptions) -> str:
        if not options.id:
            raise HookIDRequiredError()

        hook_id = numeric_hook_id(options)
        try:
            response = self.client.patch(
                f"{self._hooks_path(options)}/{hook_id}", json=self._hook_body(options)
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ProviderAPIError("update", options.project, e) from e

        return str(hook_id)

    def delete(self, options: HookOptions) -> None:
        if not options.id:
            return

        hook_id = numeric_hook_id(options)
        try:
            response = self.client.delete(f"{self._hooks_path(options)}/{hook_id}")
            if response.status_code == httpx.codes.NOT_FOUND:
                return
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ProviderAPIError("delete", options.project, e) from e
