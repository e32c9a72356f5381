"""Shared fixtures: an in-memory Kubernetes store and a fake git provider."""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional

import pytest

from githook.errors import SecretNotFoundError
from githook.kube.store import GitHookRef
from githook.models import GitHook, SecretKeySelector
from githook.receiver import ReceiverServiceReconciler
from githook.webhook import GitHookClient, HookOptions
from githook.webhook.models import events_changed
from githook.webhook.providers import GitClient


SECRET_NAME = "git-credentials"


def ready_status(name: str, namespace: str) -> Dict[str, Any]:
    return {
        "conditions": [{"type": "RoutesReady", "status": "True"}],
        "address": {"url": f"http://{name}.{namespace}.svc.cluster.local"},
        "url": f"http://{name}.{namespace}.example.com",
    }


class FakeStore:
    """In-memory stand-in for KubeStore."""

    def __init__(self, services_ready: bool = True):
        self.githooks: Dict[str, Dict[str, Any]] = {}
        self.secrets: Dict[tuple, Dict[str, str]] = {}
        self.services: Dict[str, List[Dict[str, Any]]] = {}
        self.services_ready = services_ready
        self.updates: List[GitHook] = []
        self.created_services: List[Dict[str, Any]] = []
        self.replaced_services: List[Dict[str, Any]] = []
        self._seq = 0

    # GitHooks

    def add_githook(self, githook: GitHook):
        self.githooks[githook.key] = githook.to_api()

    def get_githook(self, namespace: str, name: str) -> Optional[GitHook]:
        obj = self.githooks.get(f"{namespace}/{name}")
        if obj is None:
            return None
        return GitHook.model_validate(copy.deepcopy(obj))

    def list_githooks(self, namespace: Optional[str] = None) -> List[GitHookRef]:
        return [
            GitHookRef(
                namespace=obj["metadata"]["namespace"],
                name=obj["metadata"]["name"],
                generation=obj["metadata"].get("generation"),
            )
            for obj in self.githooks.values()
            if namespace is None or obj["metadata"]["namespace"] == namespace
        ]

    def update_githook(self, githook: GitHook):
        self.updates.append(githook.model_copy(deep=True))
        obj = self.githooks.get(githook.key)
        if obj is None:
            return
        obj["metadata"]["finalizers"] = list(githook.metadata.finalizers)
        obj["status"] = githook.status.to_api()
        if githook.being_deleted and not githook.metadata.finalizers:
            del self.githooks[githook.key]

    # Secrets

    def add_secret(self, namespace: str, name: str, data: Dict[str, str]):
        self.secrets[(namespace, name)] = data

    def get_secret_value(self, namespace: str, selector: SecretKeySelector) -> str:
        data = self.secrets.get((namespace, selector.name))
        if data is None or selector.key not in data:
            raise SecretNotFoundError(namespace, selector.name, selector.key)
        return data[selector.key]

    # Knative services

    def list_services(self, namespace: str) -> List[Dict[str, Any]]:
        return copy.deepcopy(self.services.get(namespace, []))

    def create_service(self, service: Dict[str, Any]) -> Dict[str, Any]:
        service = copy.deepcopy(service)
        self._seq += 1
        metadata = service["metadata"]
        metadata["name"] = f"{metadata.pop('generateName')}{self._seq:05d}"
        if self.services_ready:
            service["status"] = ready_status(metadata["name"], metadata["namespace"])
        self.services.setdefault(metadata["namespace"], []).append(service)
        self.created_services.append(copy.deepcopy(service))
        return copy.deepcopy(service)

    def replace_service(self, service: Dict[str, Any]) -> Dict[str, Any]:
        metadata = service["metadata"]
        items = self.services[metadata["namespace"]]
        for index, item in enumerate(items):
            if item["metadata"]["name"] == metadata["name"]:
                items[index] = copy.deepcopy(service)
        self.replaced_services.append(copy.deepcopy(service))
        return copy.deepcopy(service)


class FakeGitClient(GitClient):
    """Provider keeping hooks in memory and counting calls."""

    def __init__(self):
        self.hooks: Dict[str, Dict[str, Any]] = {}
        self.calls: List[str] = []
        self._next_id = 100
        self.closed = 0

    def validate(self, options: HookOptions) -> tuple[bool, bool]:
        self.calls.append("validate")
        hook = self.hooks.get(options.id) if options.id else None
        if hook is None:
            return False, False
        if hook["url"] != options.url:
            return True, True
        return True, events_changed(hook["events"], options.events)

    def create(self, options: HookOptions) -> str:
        self.calls.append("create")
        self._next_id += 1
        hook_id = str(self._next_id)
        self.hooks[hook_id] = {"url": options.url, "events": list(options.events)}
        return hook_id

    def update(self, options: HookOptions) -> str:
        self.calls.append("update")
        self.hooks[options.id] = {"url": options.url, "events": list(options.events)}
        return options.id

    def delete(self, options: HookOptions) -> None:
        self.calls.append("delete")
        self.hooks.pop(options.id, None)

    def close(self) -> None:
        self.closed += 1


def make_githook(
    name: str = "demo",
    namespace: str = "default",
    provider: str = "github",
    project_url: str = "https://github.com/acme/widgets",
    events: Optional[List[str]] = None,
    hook_id: str = "",
    finalizers: Optional[List[str]] = None,
    deletion_timestamp: Optional[str] = None,
    ssl_verify: bool = False,
    run_spec: Optional[Dict[str, Any]] = None,
    generation: int = 1,
) -> GitHook:
    return GitHook.model_validate(
        {
            "apiVersion": "tools.githook.dev/v1alpha1",
            "kind": "GitHook",
            "metadata": {
                "name": name,
                "namespace": namespace,
                "uid": f"uid-{name}",
                "generation": generation,
                "finalizers": finalizers or [],
                "deletionTimestamp": deletion_timestamp,
            },
            "spec": {
                "projectUrl": project_url,
                "gitProvider": provider,
                "eventTypes": events if events is not None else ["push"],
                "accessToken": {"secretKeyRef": {"name": SECRET_NAME, "key": "accessToken"}},
                "secretToken": {"secretKeyRef": {"name": SECRET_NAME, "key": "secretToken"}},
                "sslVerify": ssl_verify,
                "runSpec": run_spec if run_spec is not None else {
                    "pipelineRef": {"name": "build"},
                },
            },
            "status": {"id": hook_id},
        }
    )


@pytest.fixture
def store() -> FakeStore:
    store = FakeStore()
    store.add_secret("default", SECRET_NAME, {"accessToken": "tok", "secretToken": "s3cret"})
    return store


@pytest.fixture
def sleeps() -> List[float]:
    return []


@pytest.fixture
def receiver(store, sleeps) -> ReceiverServiceReconciler:
    return ReceiverServiceReconciler(
        store,
        image="githook-receiver:test",
        service_account="pipeline-runner",
        ready_attempts=4,
        ready_interval=2.0,
        sleep=sleeps.append,
    )


@pytest.fixture
def git_client() -> FakeGitClient:
    return FakeGitClient()


@pytest.fixture
def client_factory(git_client):
    """Client factory that always hands out the fake provider."""
    providers: List[str] = []

    def factory(provider: str, options: HookOptions) -> GitHookClient:
        providers.append(provider)
        return GitHookClient(git_client)

    factory.providers = providers
    return factory
