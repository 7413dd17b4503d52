import logging
import os
import subprocess

from fake_slurm_fixtures import get_fake_cluster_name
from sjobs_columns import parse_columns, parse_sort

logger = logging.getLogger(__name__)

DASHBOARD_TITLE = "🗂  SLURM JOB BOARD"
DEFAULT_REFRESH_RATE = 2.0


def _is_truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


def _refresh_rate(value: str | None) -> float:
    if not value:
        return DEFAULT_REFRESH_RATE
    try:
        rate = float(value)
    except ValueError:
        logger.warning(
            "SJOBS_REFRESH=%r is not a number, using %s", value, DEFAULT_REFRESH_RATE
        )
        return DEFAULT_REFRESH_RATE
    if not rate > 0:
        logger.warning("SJOBS_REFRESH must be positive, using %s", DEFAULT_REFRESH_RATE)
        return DEFAULT_REFRESH_RATE
    return rate


USE_FAKE_DATA = _is_truthy(os.environ.get("SJOBS_FAKE_DATA"))
REFRESH_RATE = _refresh_rate(os.environ.get("SJOBS_REFRESH"))
JOB_COLUMNS = parse_columns(os.environ.get("SJOBS_COLUMNS"))
SORT_COLUMNS = parse_sort(os.environ.get("SJOBS_SORT"))
LOG_LEVEL = os.environ.get("SJOBS_LOG_LEVEL", "WARNING").strip().upper() or "WARNING"


def get_cluster_name() -> str:
    if USE_FAKE_DATA:
        return get_fake_cluster_name()
    return subprocess.getoutput("hostname").upper()


CLUSTER_NAME = get_cluster_name()
