"""
GitHook controller module.
"""
from .models import ReconcileRecord, ReconcileStatus
from .reconciler import GitHookReconciler, parse_git_url
from .scheduler import ReconcileScheduler

__all__ = [
    "ReconcileRecord",
    "ReconcileStatus",
    "GitHookReconciler",
    "parse_git_url",
    "ReconcileScheduler",
]
