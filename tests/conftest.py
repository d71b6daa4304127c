from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from awsbroker.core.datastore import Db  # noqa: E402
from awsbroker.core.identity import tenant_uuid  # noqa: E402
from stubs import ACCOUNT_ID, BROKER_ID, StubStore  # noqa: E402


@pytest.fixture
def tenant():
    return tenant_uuid(ACCOUNT_ID, BROKER_ID)


@pytest.fixture
def store():
    return StubStore()


@pytest.fixture
def db(tenant, store):
    return Db(
        account_id=ACCOUNT_ID,
        account_uuid=tenant,
        broker_id=BROKER_ID,
        data_store_port=store,
    )
