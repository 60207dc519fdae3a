import threading

import pytest

from dutchswap.core.auction import (
    AuctionCancelled,
    AuctionCreated,
    AuctionFinalized,
    AuctionHouse,
    AuctionRegistry,
    AuctionStatus,
    EscrowNotFunded,
    InactiveAuction,
    SettlementCoordinator,
)
from dutchswap.core.config import EngineConfig
from dutchswap.core.state import InMemoryLedger
from dutchswap.core.storage.storage_manager import StorageManager
from dutchswap.utils.clock import ManualClock

ETHER = 10**18
T0 = 1_700_000_000


@pytest.fixture
def temp_data_dir(tmp_path):
    """Create a temporary directory for registry data."""
    data_dir = tmp_path / "registry_data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def ledger():
    ledger = InMemoryLedger()
    ledger.mint("TOKEN", "seller", 300)
    ledger.mint("native", "buyer", 10 * ETHER)
    return ledger


def test_registry_persistence(temp_data_dir, ledger):
    """Test that auction state is preserved across restarts."""
    clock = ManualClock(start=T0)

    # 1. Start registry A
    storage_a = StorageManager(data_dir=temp_data_dir)
    registry_a = AuctionRegistry(ledger, clock=clock, storage_manager=storage_a)
    coordinator_a = SettlementCoordinator(registry_a)

    ledger.transfer("TOKEN", "seller", registry_a.custody_account("seller"), 300)
    ids = [registry_a.create("seller", "TOKEN", 100, ETHER, ETHER // 10, 3600) for _ in range(3)]
    assert ids == [0, 1, 2]

    clock.advance(1800)
    coordinator_a.settle(0, "buyer", ETHER)
    registry_a.cancel(1, "seller")

    # 2. Stop registry A
    storage_a.close()
    del registry_a, coordinator_a, storage_a

    # 3. Start registry B on the same database
    storage_b = StorageManager(data_dir=temp_data_dir)
    registry_b = AuctionRegistry(ledger, clock=clock, storage_manager=storage_b)

    assert registry_b.count() == 3
    settled, cancelled, active = (registry_b.get(i) for i in ids)
    assert settled.status == AuctionStatus.SETTLED
    assert settled.buyer == "buyer"
    assert settled.settled_price == 55 * ETHER // 100
    assert cancelled.status == AuctionStatus.CANCELLED
    assert active.active and not active.finalized
    assert active.start_time == T0

    # Only the open listing keeps its escrow committed
    assert registry_b.committed_escrow("TOKEN") == 100

    # Event log restored in order
    kinds = [type(e) for e in registry_b.events.events()]
    assert kinds == [AuctionCreated] * 3 + [AuctionFinalized, AuctionCancelled]

    # 4. Continue: terminal records stay terminal, ids keep counting
    with pytest.raises(InactiveAuction):
        SettlementCoordinator(registry_b).settle(0, "buyer", ETHER)

    ledger.mint("TOKEN", "seller", 50)
    ledger.transfer("TOKEN", "seller", registry_b.custody_account("seller"), 50)
    assert registry_b.create("seller", "TOKEN", 50, ETHER, 0, 60) == 3

    storage_b.close()


def test_committed_escrow_survives_restart(temp_data_dir, ledger):
    """Escrow promised before a restart cannot be listed twice after it."""
    storage = StorageManager(data_dir=temp_data_dir)
    registry = AuctionRegistry(ledger, clock=ManualClock(start=T0), storage_manager=storage)
    ledger.transfer("TOKEN", "seller", registry.custody_account("seller"), 100)
    registry.create("seller", "TOKEN", 100, ETHER, 0, 3600)
    storage.close()

    storage = StorageManager(data_dir=temp_data_dir)
    registry = AuctionRegistry(ledger, clock=ManualClock(start=T0), storage_manager=storage)

    with pytest.raises(EscrowNotFunded):
        registry.create("seller", "TOKEN", 100, ETHER, 0, 3600)
    storage.close()


def test_house_from_config_persists(temp_data_dir, ledger):
    """AuctionHouse opens storage when persistence is enabled."""
    config = EngineConfig(persistence_enabled=True, data_dir=temp_data_dir, db_name="house.db")
    house = AuctionHouse.from_config(config, ledger, clock=ManualClock(start=T0))

    ledger.transfer("TOKEN", "seller", house.custody_account("seller"), 100)
    auction_id = house.create("seller", "TOKEN", 100, ETHER, 0, 3600)
    house.settle(auction_id, "buyer", ETHER)

    assert config.db_path.exists()

    storage = StorageManager(data_dir=temp_data_dir, db_name="house.db")
    [record] = storage.load_auctions()
    assert record.auction_id == auction_id
    assert record.status == AuctionStatus.SETTLED
    assert [e.kind for e in storage.load_events()] == ["AuctionCreated", "AuctionFinalized"]
    storage.close()


def test_in_memory_house_writes_nothing(tmp_path, ledger):
    config = EngineConfig(data_dir=tmp_path / "unused")
    house = AuctionHouse.from_config(config, ledger, clock=ManualClock(start=T0))

    ledger.transfer("TOKEN", "seller", house.custody_account("seller"), 100)
    house.create("seller", "TOKEN", 100, ETHER, 0, 3600)

    assert not (tmp_path / "unused").exists()


def test_event_log_matches_persisted_order_under_concurrency(temp_data_dir, ledger):
    """In-memory event order equals the committed order on disk."""
    storage = StorageManager(data_dir=temp_data_dir)
    registry = AuctionRegistry(ledger, clock=ManualClock(start=T0), storage_manager=storage)
    coordinator = SettlementCoordinator(registry)

    sellers = [f"seller-{i}" for i in range(8)]
    for seller in sellers:
        ledger.mint("TOKEN", seller, 20)
        ledger.transfer("TOKEN", seller, registry.custody_account(seller), 20)

    barrier = threading.Barrier(len(sellers))

    def lifecycle(seller):
        barrier.wait()
        kept = registry.create(seller, "TOKEN", 10, 0, 0, 3600)
        sold = registry.create(seller, "TOKEN", 10, 0, 0, 3600)
        registry.cancel(kept, seller)
        coordinator.settle(sold, "buyer", 0)

    threads = [threading.Thread(target=lifecycle, args=(s,)) for s in sellers]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    in_memory = [e.event_id for e in registry.events.events()]
    assert len(in_memory) == 4 * len(sellers)
    assert in_memory == [e.event_id for e in storage.load_events()]
    storage.close()

    storage = StorageManager(data_dir=temp_data_dir)
    restarted = AuctionRegistry(ledger, clock=ManualClock(start=T0), storage_manager=storage)
    assert [e.event_id for e in restarted.events.events()] == in_memory
    storage.close()



if __name__ == "__main__":
    pytest.main([__file__, "-v"])
