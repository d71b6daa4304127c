"""Background catalog refresh.

The poller runs the catalog synchronizer on a fixed interval for the whole
life of a broker. A failed cycle is logged and the next interval tries
again; a cycle is skipped while another synchronization of the same broker
is still running.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Callable

from awsbroker.core.adapters.s3templates import S3Client
from awsbroker.core.cache import Cache
from awsbroker.core.catalog import ListTemplates, UpdateCatalog
from awsbroker.core.catalog import listing_update as default_listing_update
from awsbroker.core.catalog import metadata_update as default_metadata_update
from awsbroker.core.datastore import Db
from awsbroker.core.models import BucketDetailsRequest

if TYPE_CHECKING:
    from awsbroker.core.broker import AwsBroker

logger = logging.getLogger(__name__)

PollUpdate = Callable[..., None]


def run_cycle(
    listing_cache: Cache,
    catalog_cache: Cache,
    bucket_details: BucketDetailsRequest,
    s3svc: S3Client,
    db: Db,
    broker: AwsBroker,
    update_catalog: UpdateCatalog,
    list_templates: ListTemplates,
) -> bool:
    """
    Run one refresh cycle unless another one holds the broker's catalog lock.

    Returns:
        True if the cycle ran and succeeded, False if it was skipped or failed.
    """
    if not broker.catalog_lock.acquire(blocking=False):
        logger.debug("Catalog refresh already running; skipping this cycle")
        return False
    try:
        update_catalog(
            listing_cache,
            catalog_cache,
            bucket_details,
            s3svc,
            db,
            broker,
            list_templates,
            default_listing_update,
            default_metadata_update,
        )
        return True
    except Exception:  # noqa: BLE001 - keep polling; next interval retries
        logger.exception("Catalog refresh failed")
        return False
    finally:
        broker.catalog_lock.release()


def poll_update(
    interval: int,
    listing_cache: Cache,
    catalog_cache: Cache,
    bucket_details: BucketDetailsRequest,
    s3svc: S3Client,
    db: Db,
    broker: AwsBroker,
    update_catalog: UpdateCatalog,
    list_templates: ListTemplates,
    stop: threading.Event | None = None,
) -> None:
    """
    Refresh the catalog every ``interval`` seconds until ``stop`` is set.

    Without a stop event the loop runs for the life of the process.
    """
    stop = stop or threading.Event()
    while not stop.wait(interval):
        run_cycle(
            listing_cache,
            catalog_cache,
            bucket_details,
            s3svc,
            db,
            broker,
            update_catalog,
            list_templates,
        )


def start_poller(target: PollUpdate, *args, **kwargs) -> threading.Thread:
    """Run ``target(*args, **kwargs)`` on a daemon thread and return it."""
    thread = threading.Thread(
        target=target, args=args, kwargs=kwargs, name="awsbroker-poller", daemon=True
    )
    thread.start()
    return thread
