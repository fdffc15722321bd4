import logging

wsgi_app = "onlinejudge.main:app"
preload_app = False

logger = logging.getLogger(__name__)


def post_worker_init(worker):
    from onlinejudge.core.config import settings
    logger.info(f"Gunicorn worker {worker.pid}: initialised with executor mode '{settings.EXECUTOR_MODE}'.")


workers = 4
worker_class = "uvicorn.workers.UvicornWorker"
timeout = 120
