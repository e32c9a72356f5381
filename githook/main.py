"""
GitHook Controller - Main application entry point.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .controller import GitHookReconciler, ReconcileScheduler
from .kube import KubeStore, load_config
from .web import create_api_router
from .config import settings
from .logger import logger


# Global instances
scheduler: ReconcileScheduler = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global scheduler

    load_config(settings.kubeconfig)
    store = KubeStore()
    logger.info("Kubernetes client initialized")

    reconciler = GitHookReconciler(store)
    scheduler = ReconcileScheduler(reconciler, store)
    await scheduler.start()
    logger.info(
        f"Watching GitHooks in {settings.watch_namespace or 'all namespaces'}, "
        f"resync every {settings.resync_interval}s"
    )

    api_router = create_api_router(scheduler)
    app.include_router(api_router)
    logger.info("API router registered")

    yield

    logger.info("Shutting down controller...")
    await scheduler.stop()
    logger.info("Controller shutdown complete")


app = FastAPI(
    title=settings.app_name,
    description="Keeps GitHook resources converged with git provider webhooks",
    version=settings.app_version,
    lifespan=lifespan,
    debug=settings.debug
)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "scheduler": "running" if scheduler and scheduler.running else "stopped",
    }


def run():
    import uvicorn

    uvicorn.run(
        "githook.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info"
    )


if __name__ == "__main__":
    run()
