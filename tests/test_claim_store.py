"""
Tests for claim storage.

Runs the same contract tests against the in-memory and SQLite stores, plus
SQLite-specific persistence checks.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from claimapp.domain.errors import InvalidFormatError
from claimapp.domain.schema import (
    ClaimStatus,
    PropertyClaim,
    PropertyDamageType,
    TravelClaim,
    TravelIncidentType,
    TravelInterval,
    VehicleClaim,
)
from claimapp.storage.claim_store import (
    InMemoryClaimStore,
    SQLiteClaimStore,
    create_claim_store,
)
from claimapp.utils.config import Settings


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    """Each contract test runs once per backend."""
    if request.param == "memory":
        return InMemoryClaimStore()
    return SQLiteClaimStore(tmp_path / "claims.db")


def create_vehicle_claim(plate: str = "ABC123", **overrides) -> VehicleClaim:
    fields = {
        "description": "Side mirror knocked off while parked",
        "reported_date": date.today() - timedelta(days=2),
        "registration_number": plate,
        "police_report_number": "K-2024-0100",
    }
    fields.update(overrides)
    return VehicleClaim(**fields)


def create_property_claim() -> PropertyClaim:
    return PropertyClaim(
        description="Break-in through the balcony door at night",
        reported_date=date.today() - timedelta(days=1),
        address="Kungsgatan 12, Göteborg",
        damage_type=PropertyDamageType.THEFT,
        estimated_value=Decimal("12500.50"),
    )


def create_travel_claim() -> TravelClaim:
    today = date.today()
    return TravelClaim(
        description="Hospitalised with food poisoning in Bangkok",
        reported_date=today,
        destination="Bangkok",
        travel_period=TravelInterval(today - timedelta(days=12), today - timedelta(days=2)),
        incident_type=TravelIncidentType.MEDICAL_EMERGENCY,
    )


# ============================================================================
# Repository Contract
# ============================================================================


class TestRepositoryContract:

    def test_save_returns_claim(self, store):
        claim = create_vehicle_claim()
        assert store.save(claim) == claim

    def test_get_by_id(self, store):
        claim = create_property_claim()
        store.save(claim)

        found = store.get_by_id(claim.claim_id)

        assert found == claim
        assert isinstance(found, PropertyClaim)

    def test_get_by_id_unknown_returns_none(self, store):
        assert store.get_by_id("does-not-exist") is None

    def test_save_same_id_replaces(self, store):
        original = create_vehicle_claim()
        store.save(original)
        store.save(create_vehicle_claim())

        replacement = create_vehicle_claim(
            claim_id=original.claim_id,
            police_report_number="K-2024-0999",
        )
        replacement.update_status(ClaimStatus.ESCALATED)
        store.save(replacement)

        assert store.count() == 2
        stored = store.get_by_id(original.claim_id)
        assert stored.police_report_number == "K-2024-0999"
        assert stored.status == ClaimStatus.ESCALATED

    def test_save_is_idempotent(self, store):
        claim = create_travel_claim()
        store.save(claim)
        store.save(claim)
        assert store.count() == 1

    def test_get_all_returns_every_kind(self, store):
        claims = [create_vehicle_claim(), create_property_claim(), create_travel_claim()]
        for claim in claims:
            store.save(claim)

        all_claims = store.get_all()

        assert sorted(c.claim_id for c in all_claims) == sorted(c.claim_id for c in claims)

    def test_get_all_is_a_snapshot(self, store):
        store.save(create_vehicle_claim())
        snapshot = store.get_all()

        snapshot.clear()
        store.save(create_property_claim())

        assert snapshot == []
        assert store.count() == 2
        assert len(store.get_all()) == 2

    def test_get_all_empty(self, store):
        assert store.get_all() == []

    def test_get_by_registration_number_normalizes_query(self, store):
        first = store.save(create_vehicle_claim("ABC123"))
        second = store.save(create_vehicle_claim("abc-123"))
        store.save(create_vehicle_claim("XYZ789"))
        store.save(create_property_claim())

        found = store.get_by_registration_number("abc 123")

        assert sorted(c.claim_id for c in found) == sorted([first.claim_id, second.claim_id])

    def test_get_by_registration_number_no_match(self, store):
        store.save(create_vehicle_claim("ABC123"))
        assert store.get_by_registration_number("XYZ789") == []

    def test_get_by_registration_number_invalid_plate(self, store):
        with pytest.raises(InvalidFormatError):
            store.get_by_registration_number("not a plate")


# ============================================================================
# Backend specifics
# ============================================================================


def test_in_memory_stores_are_independent():
    first = InMemoryClaimStore()
    second = InMemoryClaimStore()

    first.save(create_vehicle_claim())

    assert first.count() == 1
    assert second.count() == 0


def test_sqlite_store_persists_between_instances(tmp_path):
    """A new store on the same file sees earlier claims, values intact."""
    db_path = tmp_path / "nested" / "claims.db"
    travel = create_travel_claim()
    prop = create_property_claim()
    prop.update_status(ClaimStatus.ESCALATED)

    writer = SQLiteClaimStore(db_path)
    writer.save(travel)
    writer.save(prop)

    reader = SQLiteClaimStore(db_path)
    restored_travel = reader.get_by_id(travel.claim_id)
    restored_prop = reader.get_by_id(prop.claim_id)

    assert isinstance(restored_travel, TravelClaim)
    assert restored_travel.travel_period == travel.travel_period
    assert restored_prop.estimated_value == Decimal("12500.50")
    assert restored_prop.status == ClaimStatus.ESCALATED
    assert reader.count() == 2


def test_create_claim_store_memory():
    settings = Settings(storage_backend="memory")
    assert isinstance(create_claim_store(settings), InMemoryClaimStore)


def test_create_claim_store_sqlite(tmp_path):
    settings = Settings(storage_backend="sqlite", db_path=tmp_path / "claims.db")

    store = create_claim_store(settings)

    assert isinstance(store, SQLiteClaimStore)
    assert store.db_path == tmp_path / "claims.db"


def test_create_claim_store_returns_new_store_each_call():
    settings = Settings(storage_backend="memory")
    assert create_claim_store(settings) is not create_claim_store(settings)
