import logging
import sys
import os
import threading

from ..config import LOG_FILE_NAME, LOG_TO_CONSOLE

_RECORD_COUNTER = 0
_RECORD_COUNTER_LOCK = threading.Lock()

LOG_FORMAT = "[%(call_order)d] %(message)s - %(filename)s - %(funcName)s()"

ROOT_LOGGER, FILE_HANDLER, STREAM_HANDLER = None, None, None
class CallOrderFilter(logging.Filter):
    """Filter that adds a sequential call_order attribute to each log record."""
    def filter(self, record):
        global _RECORD_COUNTER
        # one stamp per record, however many handlers see it
        if hasattr(record, "call_order"):
            return True
        with _RECORD_COUNTER_LOCK:
            _RECORD_COUNTER += 1
            record.call_order = _RECORD_COUNTER
        return True

def setup_root_logger(log_file_name=LOG_FILE_NAME):
    """Configure the one-and-only file handler, filter, etc., on the qroute root logger."""
    global ROOT_LOGGER, FILE_HANDLER, STREAM_HANDLER
    if ROOT_LOGGER is not None:
        return ROOT_LOGGER

    ROOT_LOGGER = logging.getLogger("qroute")
    ROOT_LOGGER.setLevel(logging.DEBUG)
    ROOT_LOGGER.propagate = False

    call_filter = CallOrderFilter()

    # empty QROUTE_LOG_FILE turns the file off (read-only checkouts, CI)
    if log_file_name:
        log_file = os.path.join(os.getcwd(), log_file_name)
        FILE_HANDLER = logging.FileHandler(log_file, mode="w")
        FILE_HANDLER.setLevel(logging.DEBUG)
        FILE_HANDLER.addFilter(call_filter)
        FILE_HANDLER.setFormatter(logging.Formatter(LOG_FORMAT))
        ROOT_LOGGER.addHandler(FILE_HANDLER)
    else:
        ROOT_LOGGER.addHandler(logging.NullHandler())

    if LOG_TO_CONSOLE:
        STREAM_HANDLER = logging.StreamHandler(sys.stdout)
        STREAM_HANDLER.setLevel(logging.DEBUG)
        STREAM_HANDLER.addFilter(call_filter)
        STREAM_HANDLER.setFormatter(logging.Formatter(LOG_FORMAT))
        ROOT_LOGGER.addHandler(STREAM_HANDLER)

    return ROOT_LOGGER

def get_logger(name=""):
    """
    Returns either:
      - the root 'qroute' logger, if name=="" or "qroute"
      - or a child 'qroute.<name>' logger
    """
    root = setup_root_logger()
    if name in ("", "qroute"):
        return root
    if name.startswith("qroute."):
        name = name[len("qroute."):]
    lg = logging.getLogger(f"qroute.{name}")
    lg.setLevel(logging.DEBUG)
    # records go up to 'qroute' where the handlers live
    lg.propagate = True
    return lg

def reset_call_order():
    """Zero out the counter so the next log will be [1]."""
    global _RECORD_COUNTER
    with _RECORD_COUNTER_LOCK:
        _RECORD_COUNTER = 0
