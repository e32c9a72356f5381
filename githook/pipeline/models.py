"""
Pipeline trigger models.
"""
from pydantic import BaseModel, Field


class PipelineOptions(BaseModel):
    """Parameters for one triggered pipeline run."""

    namespace: str = Field(..., description="Namespace of the run")
    prefix: str = Field(..., description="Name prefix, usually the GitHook name")
    git_url: str = Field(..., description="Repository clone URL")
    git_revision: str = Field("", description="Revision (branch or ref) to build")
    git_commit: str = Field("", description="Commit SHA that triggered the run")
    run_spec_json: str = Field(..., description="PipelineRun spec template as JSON")
