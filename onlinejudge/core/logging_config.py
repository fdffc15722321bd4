import logging
import logging.handlers
import os
from datetime import datetime, timezone
from queue import Queue
from typing import Optional, Dict, Any

from onlinejudge.core.config import settings

startup_timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H-%M-%S")
APP_LOG_FILENAME = f"app_{startup_timestamp}.log"


def setup_app_logging_worker(log_queue: Queue, log_dir: Optional[str] = None):
    log_dir = log_dir or settings.LOG_DIR
    os.makedirs(log_dir, exist_ok=True)

    app_handler = logging.handlers.RotatingFileHandler(
        os.path.join(log_dir, APP_LOG_FILENAME), maxBytes=10 * 1024 * 1024, backupCount=5
    )
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    app_handler.setFormatter(formatter)

    listener = logging.handlers.QueueListener(log_queue, app_handler, respect_handler_level=True)
    return listener


def setup_log_queue_handler(log_dir: Optional[str] = None):
    log_queue = Queue(-1)

    queue_handler = logging.handlers.QueueHandler(log_queue)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_logger.addHandler(queue_handler)

    listener = setup_app_logging_worker(log_queue, log_dir)

    return queue_handler, listener


def teardown_log_queue_handler(queue_handler: logging.Handler, listener: logging.handlers.QueueListener):
    listener.stop()
    logging.getLogger().removeHandler(queue_handler)


def log_judge_event(submission_id: Optional[int], event_type: str,
                    details: Optional[Dict[str, Any]] = None):
    judge_logger = logging.getLogger("onlinejudge.judge_events")
    event_data = {
        "submission_id": submission_id,
        "event_type": event_type,
        "details": details or {}
    }
    judge_logger.info(event_data)
