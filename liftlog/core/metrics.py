from prometheus_client import CollectorRegistry, Counter, generate_latest
from prometheus_client.multiprocess import MultiProcessCollector
import os


registry = CollectorRegistry()
if os.getenv('prometheus_multiproc_dir'):
    MultiProcessCollector(registry)


clone_jobs_total = Counter(
    'clone_jobs_total',
    'Clone jobs processed by the worker',
    ['program_type', 'outcome'],
    registry=registry
)

clone_weeks_total = Counter(
    'clone_weeks_total',
    'Weeks handled by the program cloner',
    ['program_type', 'outcome'],
    registry=registry
)

copy_status_remediations_total = Counter(
    'copy_status_remediations_total',
    'Stuck clone remediations applied by the copy-status poller',
    ['program_type', 'action'],
    registry=registry
)

invalid_clone_messages_total = Counter(
    'invalid_clone_messages_total',
    'Push messages rejected before processing',
    ['reason'],
    registry=registry
)


def get_metrics() -> bytes:
    return generate_latest(registry)


def track_clone_job(program_type: str, outcome: str) -> None:
    clone_jobs_total.labels(program_type=program_type, outcome=outcome).inc()


def track_clone_week(program_type: str, outcome: str) -> None:
    clone_weeks_total.labels(program_type=program_type, outcome=outcome).inc()


def track_remediation(program_type: str, action: str) -> None:
    copy_status_remediations_total.labels(program_type=program_type, action=action).inc()


def track_invalid_message(reason: str) -> None:
    invalid_clone_messages_total.labels(reason=reason).inc()
