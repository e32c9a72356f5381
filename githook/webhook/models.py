"""
Webhook option models shared by all provider clients.
"""
from typing import Iterable

from pydantic import BaseModel, Field


class HookOptions(BaseModel):
    """Fully resolved parameters for one provider webhook call.

    Rebuilt on every reconciliation pass from the GitHook spec, the current
    secret values and the receiver address. Never persisted.
    """

    base_url: str = Field(..., description="Provider base URL (scheme://host)")
    owner: str = Field(..., description="Project owner or namespace")
    project: str = Field(..., description="Project name")
    access_token: str = Field("", repr=False, description="Provider API token")
    secret_token: str = Field("", repr=False, description="Shared webhook secret")
    url: str = Field("", description="Callback URL of the receiver")
    events: list[str] = Field(default_factory=list, description="Canonical event names")
    id: str = Field("", description="Existing webhook id, empty if none")
    ssl_verify: bool = Field(False, description="Provider verifies TLS on delivery")

    @property
    def full_name(self) -> str:
        """Project path in owner/project form."""
        return f"{self.owner}/{self.project}"


def events_changed(remote: Iterable[str], desired: Iterable[str]) -> bool:
    """Order independent comparison of two event sets."""
    return set(remote) != set(desired)
