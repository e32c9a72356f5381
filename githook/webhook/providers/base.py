"""
Provider client interface.
"""
from abc import ABC, abstractmethod

from ...errors import InvalidResourceError
from ..models import HookOptions


class GitClient(ABC):
    """Webhook capabilities every git provider implements."""

    @abstractmethod
    def validate(self, options: HookOptions) -> tuple[bool, bool]:
        """Return (exists, changed) for the webhook recorded in options.

        Must not modify remote state.
        """

    @abstractmethod
    def create(self, options: HookOptions) -> str:
        """Register a new webhook and return its id."""

    @abstractmethod
    def update(self, options: HookOptions) -> str:
        """Edit the webhook recorded in options and return its id."""

    @abstractmethod
    def delete(self, options: HookOptions) -> None:
        """Remove the webhook recorded in options, if any."""

    def close(self) -> None:
        """Release the connections held by the client."""


def numeric_hook_id(options: HookOptions) -> int:
    """Convert the stored hook id to the integer all providers use."""
    try:
        return int(options.id)
    except ValueError:
        raise InvalidResourceError(f"cannot convert hook id {options.id!r} to int")
