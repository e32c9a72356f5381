"""
Template variables available in pipeline run specs.
"""
from .models import PipelineOptions

SHORT_COMMIT_LENGTH = 10


def shorten(commit: str) -> str:
    if len(commit) > SHORT_COMMIT_LENGTH:
        return commit[:SHORT_COMMIT_LENGTH]
    return commit


def replace_var(template: str, name: str, value: str) -> str:
    return template.replace(f"${name}", value)


def replace_vars(template: str, options: PipelineOptions) -> str:
    """Substitute $COMMIT and $REVISION in a run spec template."""
    template = replace_var(template, "COMMIT", shorten(options.git_commit))
    return replace_var(template, "REVISION", options.git_revision)
