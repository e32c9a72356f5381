"""
Receiver service module.
"""
from .service import ReceiverServiceReconciler, controller_owner_index, is_ready

__all__ = [
    "ReceiverServiceReconciler",
    "controller_owner_index",
    "is_ready",
]
