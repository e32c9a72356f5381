"""
Git provider webhook management module.
"""
from .models import HookOptions
from .client import GitClientFactory, GitHookClient

__all__ = [
    "HookOptions",
    "GitClientFactory",
    "GitHookClient",
]
