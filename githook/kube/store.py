"""
Kubernetes API access for GitHooks, secrets and Knative services.
"""
import base64
from typing import Any, Dict, Optional

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException
from pydantic import BaseModel, ValidationError

from ..errors import InvalidResourceError, PlatformError, SecretNotFoundError
from ..models import API_GROUP, API_VERSION, PLURAL, GitHook, SecretKeySelector

KNATIVE_GROUP = "serving.knative.dev"
KNATIVE_VERSION = "v1"
KNATIVE_PLURAL = "services"


class GitHookRef(BaseModel):
    """Identity of a stored GitHook, as returned by a listing."""

    namespace: str
    name: str
    generation: Optional[int] = None

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"


def load_config(kubeconfig: Optional[str] = None):
    """Load in-cluster config, falling back to a kubeconfig file."""
    if kubeconfig:
        config.load_kube_config(config_file=kubeconfig)
        return
    try:
        config.load_incluster_config()
    except ConfigException:
        config.load_kube_config()


class KubeStore:
    """Reads and writes the objects the controller works with."""

    def __init__(
        self,
        core_api: Optional[client.CoreV1Api] = None,
        custom_api: Optional[client.CustomObjectsApi] = None,
    ):
        self.core_api = core_api or client.CoreV1Api()
        self.custom_api = custom_api or client.CustomObjectsApi()

    # GitHook operations

    def get_githook(self, namespace: str, name: str) -> Optional[GitHook]:
        """Fetch a GitHook, or None if it does not exist."""
        try:
            obj = self.custom_api.get_namespaced_custom_object(
                API_GROUP, API_VERSION, namespace, PLURAL, name
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise PlatformError(f"failed to get githook {namespace}/{name}: {e.reason}") from e

        try:
            return GitHook.model_validate(obj)
        except ValidationError as e:
            raise InvalidResourceError(f"githook {namespace}/{name} is invalid: {e}") from e

    def list_githooks(self, namespace: Optional[str] = None) -> list[GitHookRef]:
        """List stored GitHooks in one namespace or cluster wide."""
        try:
            if namespace:
                result = self.custom_api.list_namespaced_custom_object(
                    API_GROUP, API_VERSION, namespace, PLURAL
                )
            else:
                result = self.custom_api.list_cluster_custom_object(API_GROUP, API_VERSION, PLURAL)
        except ApiException as e:
            raise PlatformError(f"failed to list githooks: {e.reason}") from e

        return [
            GitHookRef(
                namespace=item["metadata"]["namespace"],
                name=item["metadata"]["name"],
                generation=item["metadata"].get("generation"),
            )
            for item in result.get("items", [])
        ]

    def update_githook(self, githook: GitHook):
        """Persist finalizers and status of a GitHook."""
        namespace, name = githook.metadata.namespace, githook.metadata.name
        metadata: Dict[str, Any] = {"finalizers": githook.metadata.finalizers}
        if githook.metadata.resource_version:
            metadata["resourceVersion"] = githook.metadata.resource_version

        try:
            self.custom_api.patch_namespaced_custom_object(
                API_GROUP, API_VERSION, namespace, PLURAL, name, {"metadata": metadata}
            )
        except ApiException as e:
            raise PlatformError(f"failed to update githook {namespace}/{name}: {e.reason}") from e

        try:
            self.custom_api.patch_namespaced_custom_object_status(
                API_GROUP, API_VERSION, namespace, PLURAL, name,
                {"status": githook.status.to_api()},
            )
        except ApiException as e:
            # Removing the last finalizer lets the API server delete the object
            if e.status == 404 and githook.being_deleted:
                return
            raise PlatformError(
                f"failed to update githook status {namespace}/{name}: {e.reason}"
            ) from e

    # Secret operations

    def get_secret_value(self, namespace: str, selector: SecretKeySelector) -> str:
        """Read one key of a secret. A missing secret or key is an error."""
        try:
            secret = self.core_api.read_namespaced_secret(selector.name, namespace)
        except ApiException as e:
            if e.status == 404:
                raise SecretNotFoundError(namespace, selector.name, selector.key) from e
            raise PlatformError(
                f"failed to get secret {namespace}/{selector.name}: {e.reason}"
            ) from e

        data = secret.data or {}
        if selector.key not in data:
            raise SecretNotFoundError(namespace, selector.name, selector.key)
        return base64.b64decode(data[selector.key]).decode("utf-8")

    # Knative service operations

    def list_services(self, namespace: str) -> list[Dict[str, Any]]:
        try:
            result = self.custom_api.list_namespaced_custom_object(
                KNATIVE_GROUP, KNATIVE_VERSION, namespace, KNATIVE_PLURAL
            )
        except ApiException as e:
            raise PlatformError(f"unable to list knative services: {e.reason}") from e
        return list(result.get("items", []))

    def create_service(self, service: Dict[str, Any]) -> Dict[str, Any]:
        namespace = service["metadata"]["namespace"]
        try:
            return self.custom_api.create_namespaced_custom_object(
                KNATIVE_GROUP, KNATIVE_VERSION, namespace, KNATIVE_PLURAL, service
            )
        except ApiException as e:
            raise PlatformError(f"failed to create knative service: {e.reason}") from e

    def replace_service(self, service: Dict[str, Any]) -> Dict[str, Any]:
        namespace = service["metadata"]["namespace"]
        name = service["metadata"]["name"]
        try:
            return self.custom_api.replace_namespaced_custom_object(
                KNATIVE_GROUP, KNATIVE_VERSION, namespace, KNATIVE_PLURAL, name, service
            )
        except ApiException as e:
            raise PlatformError(
                f"failed to update knative service {namespace}/{name}: {e.reason}"
            ) from e
