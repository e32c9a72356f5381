"""
GitHook reconciliation.

One pass converges a GitHook with its receiver service and the webhook on the
git provider, or tears the webhook down once the GitHook is being deleted.
"""
from typing import Callable, Optional
from urllib.parse import urlparse

from ..config import settings
from ..errors import ConfigurationError, InvalidProjectURLError
from ..kube.store import KubeStore
from ..logger import resource_logger
from ..models import GitHook
from ..receiver import ReceiverServiceReconciler
from ..webhook import GitHookClient, HookOptions
from .hookurl import webhook_url

ClientFactory = Callable[[str, HookOptions], GitHookClient]


def parse_git_url(project_url: str) -> tuple[str, str, str]:
    """Split a project URL into (base_url, owner, project).

    The owner keeps every path segment but the last, so nested GitLab groups
    survive.
    """
    parsed = urlparse(project_url)
    if not parsed.scheme or not parsed.netloc:
        raise InvalidProjectURLError(project_url, "missing scheme or host")

    paths = [segment for segment in parsed.path.split("/") if segment]
    if len(paths) < 2:
        raise InvalidProjectURLError(project_url, "expected /<owner>/<project>")

    base_url = f"{parsed.scheme}://{parsed.netloc}"
    owner = "/".join(paths[:-1])
    project = paths[-1].removesuffix(".git")
    return base_url, owner, project


class GitHookReconciler:
    """Reconciles GitHook resources."""

    def __init__(
        self,
        store: KubeStore,
        receiver: Optional[ReceiverServiceReconciler] = None,
        finalizer_name: str = settings.finalizer_name,
        client_factory: ClientFactory = GitHookClient.for_provider,
    ):
        self.store = store
        self.receiver = receiver or ReceiverServiceReconciler(store)
        self.finalizer_name = finalizer_name
        self.client_factory = client_factory

    def reconcile(self, namespace: str, name: str) -> Optional[GitHook]:
        """
        Run one reconciliation pass.

        Returns the GitHook as written back to the store, or None when it no
        longer exists. Errors from the pass are raised after the status has
        been written.
        """
        log = resource_logger(namespace, name)
        log.info(f"Reconciling {namespace}/{name}")

        original = self.store.get_githook(namespace, name)
        if original is None:
            log.debug("githook not found")
            return None

        source = original.model_copy(deep=True)
        try:
            if not source.being_deleted:
                self.converge(source)
            elif self.has_finalizer(source):
                self.finalize(source)
        finally:
            # Written even when the pass failed part way
            self.store.update_githook(source)

        return source

    def converge(self, source: GitHook):
        """Create or update the receiver service and the provider webhook."""
        log = resource_logger(source.metadata.namespace, source.metadata.name)

        service = self.receiver.ensure(source)
        url = webhook_url(service, source.spec.ssl_verify)

        options = self.build_hook_options(source, url)
        source.status.id = self.reconcile_webhook(source, options)

        log.info("add finalizer to the source")
        self.add_finalizer(source)

    def reconcile_webhook(self, source: GitHook, options: HookOptions) -> str:
        """Register or update the webhook and return its id."""
        log = resource_logger(source.metadata.namespace, source.metadata.name)
        git_client = self.client_factory(source.spec.git_provider, options)
        try:
            exists, changed = git_client.validate(options)

            if not exists:
                log.info(f"create new webhook for project {options.project}")
                hook_id = git_client.create(options)
                log.info(f"create new webhook successfully for project {options.project}")
                return hook_id

            if changed:
                log.info(f"update existing webhook for project {options.project}")
                hook_id = git_client.update(options)
                log.info(f"update existing webhook successfully for project {options.project}")
                return hook_id

            log.info(f"webhook exists and is up to date for project {options.project}")
            return options.id
        finally:
            git_client.close()

    def build_hook_options(self, source: GitHook, url: str = "") -> HookOptions:
        """Resolve project coordinates and secrets into webhook options."""
        base_url, owner, project = parse_git_url(source.spec.project_url)
        namespace = source.metadata.namespace

        access_token = self.store.get_secret_value(
            namespace, source.spec.access_token.secret_key_ref
        )
        secret_token = self.store.get_secret_value(
            namespace, source.spec.secret_token.secret_key_ref
        )

        return HookOptions(
            base_url=base_url,
            owner=owner,
            project=project,
            access_token=access_token,
            secret_token=secret_token,
            url=url,
            events=[event.value for event in source.spec.event_types],
            id=source.status.id,
            ssl_verify=source.spec.ssl_verify,
        )

    def finalize(self, source: GitHook):
        """Remove the provider webhook, then release the finalizer.

        The receiver service is left to garbage collection through its owner
        reference. A webhook that can no longer be addressed, for example
        because its secret was deleted with the namespace, is left on the
        provider. Remote failures keep the finalizer so the next pass retries.
        """
        log = resource_logger(source.metadata.namespace, source.metadata.name)

        if source.status.id:
            git_client = None
            try:
                options = self.build_hook_options(source)
                git_client = self.client_factory(source.spec.git_provider, options)
                log.info(f"delete webhook {options.id} for project {options.project}")
                git_client.delete(options)
            except ConfigurationError as e:
                log.warning(f"leaving webhook {source.status.id} on the provider: {e}")
            finally:
                if git_client is not None:
                    git_client.close()
            source.status.id = ""

        log.info("remove finalizer from the source")
        self.remove_finalizer(source)

    def has_finalizer(self, source: GitHook) -> bool:
        return self.finalizer_name in source.metadata.finalizers

    def add_finalizer(self, source: GitHook):
        source.metadata.finalizers = sorted(set(source.metadata.finalizers) | {self.finalizer_name})

    def remove_finalizer(self, source: GitHook):
        source.metadata.finalizers = [
            finalizer for finalizer in source.metadata.finalizers
            if finalizer != self.finalizer_name
        ]
