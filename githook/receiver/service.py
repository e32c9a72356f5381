"""
Knative receiver service management for GitHooks.
"""
import copy
import json
import time
from typing import Any, Callable, Dict, Optional

from ..config import settings
from ..errors import ReceiverNotReadyError
from ..kube.store import KNATIVE_GROUP, KNATIVE_VERSION, KubeStore
from ..logger import resource_logger
from ..models import KIND, GitHook


def controller_owner_index(obj: Dict[str, Any]) -> list[str]:
    """Index value of an object under the controller owner key.

    Returns the name of the controlling GitHook, or nothing when the object is
    not controlled by a GitHook.
    """
    for ref in obj.get("metadata", {}).get("ownerReferences") or []:
        if ref.get("controller"):
            if ref.get("kind") != KIND:
                return []
            return [ref["name"]]
    return []


def is_ready(service: Dict[str, Any]) -> bool:
    """Routes are ready and the platform reports an address."""
    status = service.get("status") or {}
    routes_ready = any(
        condition.get("type") == "RoutesReady" and condition.get("status") == "True"
        for condition in status.get("conditions") or []
    )
    return routes_ready and bool(status.get("address"))


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def semantic_match(desired: Any, actual: Any) -> bool:
    """True when every non-empty field of desired has the same value in actual.

    Fields the API server adds to actual are ignored. Empty values count as unset.
    """
    if _is_empty(desired):
        return True
    if isinstance(desired, dict):
        if not isinstance(actual, dict):
            return False
        return all(semantic_match(value, actual.get(key)) for key, value in desired.items())
    if isinstance(desired, list):
        if not isinstance(actual, list) or len(desired) != len(actual):
            return False
        return all(semantic_match(d, a) for d, a in zip(desired, actual))
    return desired == actual


class ReceiverServiceReconciler:
    """Keeps the receiver service of each GitHook created, current and ready."""

    LABEL = "receive-adapter"
    SECRET_ENV = "SECRET_TOKEN"

    def __init__(
        self,
        store: KubeStore,
        image: str = settings.webhook_image,
        service_account: str = settings.receiver_service_account,
        ready_attempts: int = settings.receiver_ready_attempts,
        ready_interval: float = settings.receiver_ready_interval,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize receiver reconciler.

        Args:
            store: Kubernetes store used for service lookups and writes
            image: Receiver container image
            service_account: Default service account of the receiver pod
            ready_attempts: Number of readiness polls
            ready_interval: Seconds between readiness polls
            sleep: Sleep function used between polls
        """
        self.store = store
        self.image = image
        self.service_account = service_account
        self.ready_attempts = ready_attempts
        self.ready_interval = ready_interval
        self.sleep = sleep

    def desired_service(self, source: GitHook) -> Dict[str, Any]:
        """Build the receiver service the GitHook should have."""
        meta = source.metadata
        run_spec_json = json.dumps(source.spec.run_spec, separators=(",", ":"), sort_keys=True)

        container_args = [
            f"--gitprovider={source.spec.git_provider}",
            f"--namespace={meta.namespace}",
            f"--name={meta.name}",
            f"--runSpecJSON={run_spec_json}",
        ]

        # The shared secret is referenced, never copied into the service
        env = [
            {
                "name": self.SECRET_ENV,
                "valueFrom": {
                    "secretKeyRef": source.spec.secret_token.secret_key_ref.to_api(),
                },
            }
        ]

        return {
            "apiVersion": f"{KNATIVE_GROUP}/{KNATIVE_VERSION}",
            "kind": "Service",
            "metadata": {
                "generateName": f"{meta.name}-webhook-",
                "namespace": meta.namespace,
                "labels": {self.LABEL: meta.name},
                "ownerReferences": [source.owner_reference().to_api()],
            },
            "spec": {
                "template": {
                    "spec": {
                        "serviceAccountName": source.spec.service_account_name or self.service_account,
                        "containers": [
                            {
                                "image": self.image,
                                "args": container_args,
                                "env": env,
                            }
                        ],
                    }
                }
            },
        }

    def get_owned(self, source: GitHook) -> Optional[Dict[str, Any]]:
        """Receiver service controlled by the GitHook.

        When several services claim the same owner the first one in listing
        order wins.
        """
        for service in self.store.list_services(source.metadata.namespace):
            if source.metadata.name in controller_owner_index(service):
                return service
        return None

    def apply(self, source: GitHook) -> Dict[str, Any]:
        """Create the receiver service, or update its pod template if it drifted."""
        log = resource_logger(source.metadata.namespace, source.metadata.name)
        desired = self.desired_service(source)

        service = self.get_owned(source)
        if service is None:
            log.info("webhook service not exist. create new one.")
            service = self.store.create_service(desired)
            log.info(f"webhook service created successfully: {service['metadata'].get('name')}")
            return service

        # Only the pod template is reconciled after creation
        desired_pod_spec = desired["spec"]["template"]["spec"]
        template = service.setdefault("spec", {}).setdefault("template", {})
        if not semantic_match(desired_pod_spec, template.get("spec")):
            log.info("webhook service template update")
            template["spec"] = copy.deepcopy(desired_pod_spec)
            service = self.store.replace_service(service)
            log.info("webhook service template update successfully")

        return service

    def wait_until_ready(self, source: GitHook) -> Dict[str, Any]:
        """Poll the receiver service until it is ready.

        Raises:
            ReceiverNotReadyError: If the service is not ready after all attempts
        """
        log = resource_logger(source.metadata.namespace, source.metadata.name)

        for attempt in range(1, self.ready_attempts + 1):
            service = self.get_owned(source)
            if service is not None and is_ready(service):
                return service

            log.debug(f"webhook service not ready (attempt {attempt}/{self.ready_attempts})")
            if attempt < self.ready_attempts:
                self.sleep(self.ready_interval)

        raise ReceiverNotReadyError(
            source.metadata.namespace, source.metadata.name, self.ready_attempts
        )

    def ensure(self, source: GitHook) -> Dict[str, Any]:
        """Apply the receiver service and wait for it to become ready."""
        log = resource_logger(source.metadata.namespace, source.metadata.name)

        service = self.apply(source)

        log.info(f"ensure webhook service is ready: {service['metadata'].get('name')}")
        service = self.wait_until_ready(source)
        log.info(f"webhook service is ready: {service['metadata'].get('name')}")

        return service
