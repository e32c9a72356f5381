"""
Tekton client for triggering pipeline runs.
"""
import json
from typing import Any, Dict, Optional

from kubernetes import client
from kubernetes.client.exceptions import ApiException

from ..errors import PipelineTemplateError, PlatformError
from ..logger import logger
from .models import PipelineOptions
from .variables import replace_vars

TEKTON_GROUP = "tekton.dev"
TEKTON_VERSION = "v1alpha1"
RESOURCES_PLURAL = "pipelineresources"
RUNS_PLURAL = "pipelineruns"

GIT_RESOURCE_TYPE = "git"
GIT_SOURCE_BINDING = "git-source"


def _param(resource: Dict[str, Any], name: str) -> Optional[str]:
    for param in resource.get("spec", {}).get("params") or []:
        if param.get("name") == name:
            return param.get("value")
    return None


class PipelineClient:
    """Creates Tekton pipeline runs from a GitHook run spec template."""

    def __init__(self, custom_api: Optional[client.CustomObjectsApi] = None):
        self.custom_api = custom_api or client.CustomObjectsApi()

    def get_or_create_git_resource(self, options: PipelineOptions) -> str:
        """
        Find the git pipeline resource for a repository, creating it if missing.

        Args:
            options: Pipeline options carrying namespace, prefix and git URL

        Returns:
            Name of the pipeline resource
        """
        try:
            result = self.custom_api.list_namespaced_custom_object(
                TEKTON_GROUP, TEKTON_VERSION, options.namespace, RESOURCES_PLURAL
            )
        except ApiException as e:
            raise PlatformError(f"failed to list pipeline resource: {e.reason}") from e

        for item in result.get("items", []):
            if item.get("spec", {}).get("type") != GIT_RESOURCE_TYPE:
                continue
            if _param(item, "url") == options.git_url:
                return item["metadata"]["name"]

        resource = {
            "apiVersion": f"{TEKTON_GROUP}/{TEKTON_VERSION}",
            "kind": "PipelineResource",
            "metadata": {
                "generateName": f"{options.prefix}-git-source-",
                "namespace": options.namespace,
            },
            "spec": {
                "type": GIT_RESOURCE_TYPE,
                "params": [
                    {"name": "url", "value": options.git_url},
                    {"name": "revision", "value": options.git_revision},
                ],
            },
        }

        try:
            created = self.custom_api.create_namespaced_custom_object(
                TEKTON_GROUP, TEKTON_VERSION, options.namespace, RESOURCES_PLURAL, resource
            )
        except ApiException as e:
            raise PlatformError(f"failed to create pipeline resource: {e.reason}") from e

        logger.info(f"created git pipeline resource {created['metadata']['name']} for {options.git_url}")
        return created["metadata"]["name"]

    def generate_pipeline_run(self, options: PipelineOptions) -> Dict[str, Any]:
        """Build the pipeline run object for the given options."""
        try:
            run_spec = json.loads(replace_vars(options.run_spec_json, options))
        except json.JSONDecodeError as e:
            raise PipelineTemplateError(f"invalid pipeline run spec: {e}") from e

        if not isinstance(run_spec, dict):
            raise PipelineTemplateError("pipeline run spec must be a JSON object")

        if not run_spec.get("resources"):
            resource_name = self.get_or_create_git_resource(options)
            run_spec["resources"] = [
                {"name": GIT_SOURCE_BINDING, "resourceRef": {"name": resource_name}}
            ]

        return {
            "apiVersion": f"{TEKTON_GROUP}/{TEKTON_VERSION}",
            "kind": "PipelineRun",
            "metadata": {
                "generateName": f"{options.prefix}-",
                "namespace": options.namespace,
            },
            "spec": run_spec,
        }

    def create_pipeline_run(self, options: PipelineOptions) -> Dict[str, Any]:
        """Create a new pipeline run."""
        pipeline_run = self.generate_pipeline_run(options)

        try:
            created = self.custom_api.create_namespaced_custom_object(
                TEKTON_GROUP, TEKTON_VERSION, options.namespace, RUNS_PLURAL, pipeline_run
            )
        except ApiException as e:
            raise PlatformError(f"error creating pipeline run: {e.reason}") from e

        logger.info(f"create pipeline run successfully {created['metadata']['name']}")
        return created
