from __future__ import annotations

import logging

from matzip.utils.logger import get_logger


def test_module_loggers_share_one_package_handler():
    first = get_logger("matzip.db.connection")
    second = get_logger("matzip.services.data_access")
    package_logger = logging.getLogger("matzip")

    assert first.getEffectiveLevel() == package_logger.level
    assert second.name == "matzip.services.data_access"
    assert len(package_logger.handlers) == 1


def test_log_lines_carry_the_worker_thread_name():
    (handler,) = logging.getLogger("matzip").handlers
    record = logging.LogRecord("matzip.db", logging.INFO, __file__, 1, "saved", None, None)
    record.threadName = "matzip-view_0"
    assert "| matzip-view_0 | matzip.db | saved" in handler.format(record)
