"""
Kubernetes access module.
"""
from .store import GitHookRef, KubeStore, load_config

__all__ = [
    "GitHookRef",
    "KubeStore",
    "load_config",
]
