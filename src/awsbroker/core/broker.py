"""Broker context: configuration, caches, clients and persistence.

``new_aws_broker`` builds a broker in a fixed sequence of fallible steps
(session, account identity, tenant UUID, clients, initial catalog sync,
poller start). Any failing step raises and no broker is returned, so a
caller never sees a broker with an unresolved identity or an empty catalog.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from awsbroker.core.adapters.dynamodb import DynamoDbDataStore
from awsbroker.core.adapters.s3templates import S3Client
from awsbroker.core.cache import Cache, MemoryCache
from awsbroker.core.catalog import UpdateCatalog, list_templates, listing_update, metadata_update
from awsbroker.core.clients import AwsClients
from awsbroker.core.config import BrokerOptions, add_trailing_slash, validate_options
from awsbroker.core.datastore import Db
from awsbroker.core.identity import tenant_uuid
from awsbroker.core.models import BucketDetailsRequest
from awsbroker.core.poller import PollUpdate, start_poller

logger = logging.getLogger(__name__)

SessionResolver = Callable[
    [str | None, str | None, str, str, str | None, Mapping[str, str]], Any
]
AccountResolver = Callable[[Any], str]

POLLER_JOIN_TIMEOUT = 5.0


@dataclass(eq=False)
class AwsBroker:
    """A fully initialized broker; build it with :func:`new_aws_broker`."""

    key_id: str | None
    secret_key: str | None
    profile: str | None
    table_name: str
    s3_bucket: str
    s3_key: str
    s3_region: str
    template_filter: str
    region: str
    broker_id: str
    account_id: str
    poll_interval: int
    session: Any
    clients: AwsClients
    get_session: SessionResolver
    s3svc: S3Client
    db: Db
    listing_cache: Cache = field(default_factory=MemoryCache)
    catalog_cache: Cache = field(default_factory=MemoryCache)
    catalog_lock: threading.Lock = field(default_factory=threading.Lock)
    _stop: threading.Event = field(default_factory=threading.Event, repr=False)
    _poller: threading.Thread | None = field(default=None, repr=False)

    @property
    def bucket_details(self) -> BucketDetailsRequest:
        return BucketDetailsRequest(
            bucket=self.s3_bucket, prefix=self.s3_key, filter=self.template_filter
        )

    def sync_catalog(self, update_catalog: UpdateCatalog) -> None:
        """Run one catalog refresh, waiting for any refresh already running."""
        with self.catalog_lock:
            update_catalog(
                self.listing_cache,
                self.catalog_cache,
                self.bucket_details,
                self.s3svc,
                self.db,
                self,
                list_templates,
                listing_update,
                metadata_update,
            )

    def session_for(self, params: Mapping[str, str], region: str | None = None) -> Any:
        """
        Return a session for a request.

        Requests naming a ``target_role_name`` get a session over the
        assumed role; all others share the broker's own credentials.
        """
        region = region or self.region
        if not params.get("target_role_name") and region == self.region:
            return self.session
        return self.get_session(
            self.key_id,
            self.secret_key,
            region,
            self.account_id,
            self.profile,
            {k: v for k, v in params.items() if k in ("target_role_name", "target_account_id")},
        )

    def close(self) -> None:
        """Stop the background poller and wait briefly for it to exit."""
        self._stop.set()
        poller = self._poller
        if poller is not None and poller is not threading.current_thread():
            poller.join(timeout=POLLER_JOIN_TIMEOUT)
            if poller.is_alive():
                logger.warning("Catalog poller still running after %ss", POLLER_JOIN_TIMEOUT)

    def __enter__(self) -> AwsBroker:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def new_aws_broker(
    options: BrokerOptions,
    get_session: SessionResolver,
    clients: AwsClients,
    get_account_id: AccountResolver,
    update_catalog: UpdateCatalog,
    poll_update: PollUpdate,
) -> AwsBroker:
    """
    Build a broker, synchronize its catalog once and start the poller.

    Args:
        options: Broker options.
        get_session: Session resolver (see ``awsbroker.core.auth.get_session``).
        clients: Producers for the AWS service clients.
        get_account_id: Resolves the account id from an STS client.
        update_catalog: Catalog synchronizer used for the initial sync and
            by the poller.
        poll_update: Poller loop, started on a daemon thread.

    Raises:
        ValidationError: If the options are incomplete.
        IdentityError: If the account cannot be resolved.
        Exception: Whatever the initial catalog synchronization raised.
    """
    validate_options(options)

    session = get_session(
        options.key_id, options.secret_key, options.region, "", options.profile, {}
    )
    s3_session = get_session(
        options.key_id, options.secret_key, options.s3_region, "", options.profile, {}
    )

    account_id = get_account_id(clients.new_sts(session))
    account_uuid = tenant_uuid(account_id, options.broker_id)
    logger.debug("Resolved account %s (tenant %s)", account_id, account_uuid)

    db = Db(
        account_id=account_id,
        account_uuid=account_uuid,
        broker_id=options.broker_id,
        data_store_port=DynamoDbDataStore(
            clients.new_ddb(session), options.table_name, account_uuid, options.broker_id
        ),
    )

    broker = AwsBroker(
        key_id=options.key_id,
        secret_key=options.secret_key,
        profile=options.profile,
        table_name=options.table_name,
        s3_bucket=options.s3_bucket,
        s3_key=add_trailing_slash(options.s3_key),
        s3_region=options.s3_region,
        template_filter=options.template_filter,
        region=options.region,
        broker_id=options.broker_id,
        account_id=account_id,
        poll_interval=options.poll_interval,
        session=session,
        clients=clients,
        get_session=get_session,
        s3svc=clients.new_s3(s3_session),
        db=db,
    )

    broker.sync_catalog(update_catalog)

    broker._poller = start_poller(
        poll_update,
        broker.poll_interval,
        broker.listing_cache,
        broker.catalog_cache,
        broker.bucket_details,
        broker.s3svc,
        broker.db,
        broker,
        update_catalog,
        list_templates,
        stop=broker._stop,
    )
    return broker
