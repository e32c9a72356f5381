"""
Scheduler driving reconciliation passes for all GitHooks.
"""
import asyncio
from typing import Dict, Optional

from ..config import settings
from ..errors import ConfigurationError, SecretNotFoundError
from ..kube.store import KubeStore
from ..logger import logger
from .models import ReconcileRecord, ReconcileStatus, utcnow
from .reconciler import GitHookReconciler


class ReconcileScheduler:
    """Runs reconciliation passes periodically and on demand.

    At most one pass runs per GitHook at a time. Passes block on the network
    and on the receiver readiness poll, so each one runs in a worker thread.
    """

    def __init__(
        self,
        reconciler: GitHookReconciler,
        store: KubeStore,
        namespace: Optional[str] = settings.watch_namespace,
        resync_interval: float = settings.resync_interval,
        max_concurrent: int = settings.max_concurrent_reconciles,
    ):
        self.reconciler = reconciler
        self.store = store
        self.namespace = namespace
        self.resync_interval = resync_interval

        self.records: Dict[str, ReconcileRecord] = {}
        self._in_flight: Dict[str, asyncio.Task] = {}
        self._semaphore = asyncio.Semaphore(max_concurrent)

        # Background resync
        self._monitor_task: Optional[asyncio.Task] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def trigger(self, namespace: str, name: str, generation: Optional[int] = None) -> ReconcileRecord:
        """Request a pass for one GitHook unless one is already running."""
        key = f"{namespace}/{name}"
        record = self.records.get(key)
        if record is None:
            record = ReconcileRecord(namespace=namespace, name=name)
            self.records[key] = record

        if key in self._in_flight:
            return record

        if generation is not None:
            record.generation = generation
        record.status = ReconcileStatus.PENDING

        task = asyncio.create_task(self._run(record))
        self._in_flight[key] = task
        task.add_done_callback(lambda _: self._in_flight.pop(key, None))
        return record

    async def _run(self, record: ReconcileRecord):
        async with self._semaphore:
            record.status = ReconcileStatus.RUNNING
            record.started_at = utcnow()
            record.attempts += 1

            try:
                githook = await asyncio.to_thread(
                    self.reconciler.reconcile, record.namespace, record.name
                )
            except SecretNotFoundError as e:
                # Secrets change without bumping the GitHook generation
                record.status = ReconcileStatus.FAILED
                record.error_message = str(e)
                logger.warning(f"GitHook {record.key} is waiting for its secret: {e}")
            except ConfigurationError as e:
                record.status = ReconcileStatus.BLOCKED
                record.error_message = str(e)
                logger.error(f"GitHook {record.key} needs a spec change: {e}")
            except Exception as e:
                # Retried on the next resync
                record.status = ReconcileStatus.FAILED
                record.error_message = str(e)
                logger.error(f"Reconcile of {record.key} failed: {e}", exc_info=True)
            else:
                record.error_message = None
                if githook is None:
                    record.status = ReconcileStatus.DELETED
                else:
                    record.status = ReconcileStatus.SUCCEEDED
                    record.hook_id = githook.status.id
                    record.generation = githook.metadata.generation
            finally:
                record.finished_at = utcnow()

    async def resync(self):
        """Schedule a pass for every stored GitHook."""
        refs = await asyncio.to_thread(self.store.list_githooks, self.namespace)

        seen = set()
        for ref in refs:
            seen.add(ref.key)
            record = self.records.get(ref.key)
            # Configuration errors are not retried until the spec changes
            if (
                record is not None
                and record.status == ReconcileStatus.BLOCKED
                and record.generation == ref.generation
            ):
                continue
            self.trigger(ref.namespace, ref.name, ref.generation)

        for key in list(self.records):
            if key not in seen and key not in self._in_flight:
                del self.records[key]

    async def _monitor(self):
        """Background loop resyncing all GitHooks."""
        while self._running:
            try:
                await self.resync()
            except Exception as e:
                logger.error(f"Error in resync: {e}", exc_info=True)

            await asyncio.sleep(self.resync_interval)

    def get_record(self, namespace: str, name: str) -> Optional[ReconcileRecord]:
        return self.records.get(f"{namespace}/{name}")

    def list_records(
        self,
        namespace: Optional[str] = None,
        status: Optional[ReconcileStatus] = None,
    ) -> list[ReconcileRecord]:
        """List records with optional filters, ordered by key."""
        records = list(self.records.values())

        if namespace:
            records = [r for r in records if r.namespace == namespace]

        if status:
            records = [r for r in records if r.status == status]

        return sorted(records, key=lambda r: r.key)

    async def start(self):
        """Start background resync."""
        if self._running:
            return

        self._running = True
        self._monitor_task = asyncio.create_task(self._monitor())
        logger.info("Reconcile scheduler started")

    async def stop(self):
        """Stop background resync and wait for running passes."""
        if not self._running:
            return

        self._running = False

        if self._monitor_task:
            self._monitor_task.cancel()
            try:
                await self._monitor_task
            except asyncio.CancelledError:
                pass

        # Passes run in threads and cannot be interrupted
        if self._in_flight:
            await asyncio.gather(*self._in_flight.values(), return_exceptions=True)

        logger.info("Reconcile scheduler stopped")
