"""
Pipeline trigger module.
"""
from .models import PipelineOptions
from .client import PipelineClient

__all__ = [
    "PipelineOptions",
    "PipelineClient",
]
