import logging

from zfs_dashboard.utils.log_context import get_fetch_id


class ClassMethodFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        parts = record.name.split(".")
        class_name = parts[-1] if parts else "?"
        record.class_method = f"{class_name}.{record.funcName}"
        return True


class FetchIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        # Correlates log lines of overlapping fetch_stats calls
        record.fetch_id = getattr(record, "fetch_id", None) or get_fetch_id()
        return True
