"""
Service context tag for log lines.

Identifies the process a log line came from when several API instances (and their
reaper loops) write to the same collector.
"""

from functools import lru_cache
import os


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'coach-booking')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Container hostname is the short container id under docker / k8s
    instance = os.getenv('HOSTNAME', '')[:12] or 'local'

    return f'{service_name}@{deploy_env}:{instance}:{os.getpid()}'
