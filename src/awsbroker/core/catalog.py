"""Catalog synchronization between S3 and the in-memory caches.

One refresh cycle runs three stages:
  1) list the templates in the bucket,
  2) diff the listing against the listing cache (flag changed templates),
  3) fetch, parse and cache the metadata of every flagged template.

Every stage is passed in as a function so callers (and tests) can swap
any of them. Errors propagate unchanged, except that an unreachable bucket
is reported with ``BUCKET_ACCESS_MESSAGE``.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any, Callable

from botocore.exceptions import ClientError

from awsbroker.core.adapters.s3templates import S3Client, is_bucket_access_error
from awsbroker.core.cache import LISTINGS_KEY, Cache
from awsbroker.core.datastore import Db
from awsbroker.core.errors import BUCKET_ACCESS_MESSAGE, BucketAccessError, NotFoundError
from awsbroker.core.identity import service_uuid
from awsbroker.core.models import (
    BucketDetailsRequest,
    ServiceDefinition,
    ServiceLastUpdate,
    ServiceNeedsUpdate,
)
from awsbroker.core.templates import build_service_definition, load_template

if TYPE_CHECKING:
    from awsbroker.core.broker import AwsBroker

logger = logging.getLogger(__name__)

ListTemplates = Callable[[BucketDetailsRequest, Any], list[ServiceLastUpdate]]
ListingUpdate = Callable[[list[ServiceLastUpdate], Cache], None]
MetadataUpdate = Callable[[Cache, Cache, BucketDetailsRequest, S3Client, Db], Any]
UpdateCatalog = Callable[..., None]


def list_templates(source: BucketDetailsRequest, broker: AwsBroker) -> list[ServiceLastUpdate]:
    """
    List the service templates available in the bucket.

    Only keys directly below ``source.prefix`` that end with
    ``source.filter`` are templates; the name is the key without prefix
    and filter.

    Returns:
        Templates ordered by name.
    """
    found: dict[str, ServiceLastUpdate] = {}
    for obj in broker.s3svc.list_objects(source.bucket, source.prefix):
        key = str(obj.get("Key") or "")
        if not key.startswith(source.prefix) or not key.endswith(source.filter):
            continue
        name = key[len(source.prefix) : len(key) - len(source.filter)]
        if not name or "/" in name or name == LISTINGS_KEY:
            continue
        found[name] = ServiceLastUpdate(
            name=name, last_modified=obj.get("LastModified") or obj.get("ETag")
        )
    return [found[name] for name in sorted(found)]


def listing_update(listings: list[ServiceLastUpdate], listing_cache: Cache) -> None:
    """
    Record the current listing and flag templates that need a refresh.

    A template is flagged when it is new, when its modification marker
    changed, or when its previous refresh never completed.
    """
    try:
        previous = listing_cache.get(LISTINGS_KEY)
    except NotFoundError:
        previous = []
    pending = {entry.name for entry in previous if entry.update}

    updates: list[ServiceNeedsUpdate] = []
    for item in listings:
        try:
            changed = listing_cache.get(item.name) != item.last_modified
        except NotFoundError:
            changed = True
        listing_cache.set(item.name, item.last_modified)
        updates.append(ServiceNeedsUpdate(name=item.name, update=changed or item.name in pending))

    listing_cache.set(LISTINGS_KEY, updates)


def metadata_update(
    listing_cache: Cache,
    catalog_cache: Cache,
    bucket_details: BucketDetailsRequest,
    s3svc: S3Client,
    db: Db,
) -> int:
    """
    Refresh the catalog entry of every flagged template.

    The flag of a template is cleared only after its service definition
    has been cached and persisted. Processing stops at the first error.

    Returns:
        Number of templates refreshed.

    Raises:
        NotFoundError: If the listing has not been recorded yet, or a
            template object has no body.
        ParseError: If a template cannot be parsed.
    """
    listings = list(listing_cache.get(LISTINGS_KEY))
    refreshed = 0

    for i, entry in enumerate(listings):
        if not entry.update:
            continue

        key = bucket_details.template_key(entry.name)
        resp = s3svc.get_object(bucket_details.bucket, key)
        body = resp.get("Body")
        raw = b""
        if body is not None:
            try:
                raw = body.read()
            finally:
                body.close()
        if not raw:
            raise NotFoundError("s3 object body missing")

        doc = load_template(raw)
        service = build_service_definition(doc, entry.name, db.account_uuid)
        catalog_cache.set(service.id, service)
        db.data_store_port.put_service_definition(service)

        listings[i] = ServiceNeedsUpdate(name=entry.name, update=False)
        listing_cache.set(LISTINGS_KEY, list(listings))
        refreshed += 1
        logger.debug("Refreshed catalog entry %s (%s)", entry.name, service.id)

    return refreshed


def update_catalog(
    listing_cache: Cache,
    catalog_cache: Cache,
    bucket_details: BucketDetailsRequest,
    s3svc: S3Client,
    db: Db,
    broker: AwsBroker,
    list_templates: ListTemplates = list_templates,
    listing_update: ListingUpdate = listing_update,
    metadata_update: MetadataUpdate = metadata_update,
) -> None:
    """
    Run one catalog refresh cycle: list, diff, refresh metadata.

    Raises:
        BucketAccessError: With ``BUCKET_ACCESS_MESSAGE`` when the bucket is
            missing or not readable.
        Exception: Any other stage error, unchanged.
    """
    try:
        listings = list_templates(bucket_details, broker)
    except (BucketAccessError, ClientError) as exc:
        if is_bucket_access_error(exc):
            raise BucketAccessError(BUCKET_ACCESS_MESSAGE) from exc
        raise

    listing_update(listings, listing_cache)
    refreshed = metadata_update(listing_cache, catalog_cache, bucket_details, s3svc, db)
    logger.info(
        "Catalog synchronized: %d template(s), %s refreshed",
        len(listings),
        refreshed if refreshed is not None else "?",
    )


def cached_services(
    listing_cache: Cache, catalog_cache: Cache, tenant: uuid.UUID
) -> list[ServiceDefinition]:
    """
    Return the cached service definitions of all listed templates.

    A template still waiting for its first refresh is left out; a cleared
    entry without a catalog entry raises NotFoundError.
    """
    try:
        listings = listing_cache.get(LISTINGS_KEY)
    except NotFoundError:
        return []

    services: list[ServiceDefinition] = []
    for entry in listings:
        try:
            services.append(catalog_cache.get(service_uuid(tenant, entry.name)))
        except NotFoundError:
            if not entry.update:
                raise
    return services
