"""
Git provider webhook clients.
"""
from .base import GitClient
from .github import GitHubClient
from .gitlab import GitLabClient
from .gogs import GogsClient

__all__ = [
    "GitClient",
    "GitHubClient",
    "GitLabClient",
    "GogsClient",
]
