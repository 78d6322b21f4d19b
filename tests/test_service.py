"""
Tests for MutantScan — Detection Service and Stats.

These tests verify:
1. End-to-end detection on known grids
2. A repeated grid is answered from the store without scanning
3. A lost insert race still returns the computed verdict
4. Store and fingerprint faults propagate unchanged
5. Stats ratio, including the zero-human case
"""

import pytest

from mutantscan import fingerprint as fingerprint_module
from mutantscan.domain import (
    DuplicateRecordError,
    FingerprintError,
    InvalidGridError,
    InvalidGridReason,
    Record,
    Stats,
    StoreError,
)
from mutantscan.fingerprint import fingerprint_rows
from mutantscan.scanning.strategy import select_strategy
from mutantscan.service import MutantService, compute_stats
from mutantscan.storage.store import InMemoryRecordStore, RecordStore


MUTANT_ROWS = ["AAAA", "CCCC", "TCAG", "GGTC"]
HUMAN_ROWS = ["ATGC", "CAGT", "TTAT", "AGAC"]
ONE_RUN_ROWS = ["AAAA", "CAGT", "TTAT", "AGAC"]


class CountingSelector:
    """Wraps select_strategy and counts how many scans were started."""

    def __init__(self):
        self.calls = 0

    def __call__(self, size):
        self.calls += 1
        return select_strategy(size)


class RacingStore(InMemoryRecordStore):
    """Never finds anything and always loses the insert race."""

    def find(self, fingerprint):
        return None

    def insert(self, record):
        raise DuplicateRecordError(record.fingerprint)


class BrokenStore(RecordStore):
    """Every operation fails as if the database were unreachable."""

    def find(self, fingerprint):
        raise StoreError("connection refused")

    def insert(self, record):
        raise StoreError("connection refused")

    def count(self, is_mutant):
        raise StoreError("connection refused")


@pytest.fixture
def selector():
    return CountingSelector()


@pytest.fixture
def service(selector):
    return MutantService(InMemoryRecordStore(), selector=selector)


# =============================================================================
# DETECTION TESTS
# =============================================================================

class TestDetect:
    """End-to-end validate + resolve."""

    def test_mutant(self, service):
        """Two horizontal runs make a mutant."""
        assert service.detect(MUTANT_ROWS) is True

    def test_human(self, service):
        """A grid with no runs is human."""
        assert service.detect(HUMAN_ROWS) is False

    def test_single_run_is_human(self, service):
        """Exactly one run is below the mutant threshold."""
        assert service.detect(ONE_RUN_ROWS) is False

    def test_large_grid_uses_concurrent_path(self, service):
        """A 20x20 grid goes through the concurrent scanner."""
        rows = ["ATCG" * 5] * 20
        assert service.detect(rows) is True

    def test_invalid_shape_raises(self, service, selector):
        """A non-square grid raises before any scan."""
        with pytest.raises(InvalidGridError) as exc:
            service.detect(["ATG", "CAGT"])

        assert exc.value.reason == InvalidGridReason.NOT_SQUARE
        assert selector.calls == 0

    def test_invalid_characters_raise(self, service):
        """Lowercase bases raise InvalidGridError."""
        with pytest.raises(InvalidGridError) as exc:
            service.detect(["atgc", "cagt", "ttat", "agac"])
        assert exc.value.reason == InvalidGridReason.INVALID_CHARACTERS

    def test_invalid_input_not_stored(self, service):
        """Rejected input leaves the store untouched."""
        with pytest.raises(InvalidGridError):
            service.detect(None)
        assert len(service.store) == 0

    def test_validate_does_not_raise(self, service):
        """validate returns a rejected result instead of raising."""
        result = service.validate(["AT", None])
        assert result.accepted is False
        assert result.reason == InvalidGridReason.NULL_ROW

    def test_bare_string_is_not_a_grid(self, service, selector):
        """A single string is rejected as empty rather than scanned as a 1x1 grid."""
        with pytest.raises(InvalidGridError) as exc:
            service.detect("A")

        assert exc.value.reason == InvalidGridReason.EMPTY
        assert selector.calls == 0
        assert len(service.store) == 0


# =============================================================================
# DEDUP CACHE TESTS
# =============================================================================

class TestDedupCache:
    """At most one scan per distinct grid content."""

    def test_first_call_scans_and_stores(self, service, selector):
        """A miss scans once and stores the verdict."""
        service.detect(MUTANT_ROWS)

        assert selector.calls == 1
        record = service.store.find(fingerprint_rows(MUTANT_ROWS))
        assert record is not None
        assert record.is_mutant is True

    def test_second_call_is_cache_hit(self, service, selector):
        """The same grid twice is scanned only once."""
        first = service.detect(HUMAN_ROWS)
        second = service.detect(HUMAN_ROWS)

        assert first == second
        assert selector.calls == 1
        assert len(service.store) == 1

    def test_repeated_calls_are_deterministic(self, service, selector):
        """Ten calls give one verdict and one scan."""
        verdicts = {service.detect(MUTANT_ROWS) for _ in range(10)}

        assert verdicts == {True}
        assert selector.calls == 1

    def test_stored_verdict_is_trusted(self, selector):
        """A hit returns whatever the store holds, without re-checking."""
        store = InMemoryRecordStore()
        store.insert(Record(fingerprint=fingerprint_rows(HUMAN_ROWS), is_mutant=True))
        service = MutantService(store, selector=selector)

        assert service.detect(HUMAN_ROWS) is True
        assert selector.calls == 0

    def test_distinct_grids_each_scanned(self, service, selector):
        """Different grids are each scanned and stored."""
        service.detect(MUTANT_ROWS)
        service.detect(HUMAN_ROWS)

        assert selector.calls == 2
        assert len(service.store) == 2

    def test_lost_insert_race_returns_verdict(self, selector):
        """A duplicate insert still returns the computed verdict."""
        service = MutantService(RacingStore(), selector=selector)

        assert service.detect(MUTANT_ROWS) is True
        assert service.detect(HUMAN_ROWS) is False


# =============================================================================
# FAULT PROPAGATION TESTS
# =============================================================================

class TestFaults:
    """Internal faults propagate unchanged."""

    def test_store_failure_propagates(self, selector):
        """Store faults reach the caller unchanged."""
        service = MutantService(BrokenStore(), selector=selector)

        with pytest.raises(StoreError, match="connection refused"):
            service.detect(MUTANT_ROWS)
        assert selector.calls == 0

    def test_fingerprint_failure_propagates(self, service, monkeypatch):
        """Fingerprint faults reach the caller unchanged."""
        monkeypatch.setattr(fingerprint_module, "FINGERPRINT_ALGORITHM", "no-such-hash")

        with pytest.raises(FingerprintError):
            service.detect(MUTANT_ROWS)

    def test_stats_store_failure_propagates(self):
        """Stats surface store faults."""
        with pytest.raises(StoreError):
            MutantService(BrokenStore()).stats()


# =============================================================================
# STATS TESTS
# =============================================================================

class TestStats:
    """Ratio = mutants / humans, 0.0 when there are no humans."""

    def test_ratio(self):
        """40 mutants over 100 humans is 0.4."""
        assert Stats.from_counts(40, 100).ratio == pytest.approx(0.4)

    def test_no_humans_gives_zero(self):
        """No humans gives 0.0, not infinity."""
        stats = Stats.from_counts(40, 0)
        assert stats.ratio == 0.0

    def test_empty_gives_zero(self):
        """An empty store gives 0.0."""
        assert Stats.from_counts(0, 0).ratio == 0.0

    def test_to_dict_field_names(self):
        """to_dict uses the public field names."""
        assert Stats.from_counts(40, 100).to_dict() == {
            "count_mutant_dna": 40,
            "count_human_dna": 100,
            "ratio": pytest.approx(0.4),
        }

    def test_stats_from_store(self):
        """compute_stats reads counts from the store."""
        store = InMemoryRecordStore()
        for i in range(40):
            store.insert(Record(fingerprint=f"m{i}", is_mutant=True))
        for i in range(100):
            store.insert(Record(fingerprint=f"h{i}", is_mutant=False))

        stats = compute_stats(store)
        assert stats.count_mutant_dna == 40
        assert stats.count_human_dna == 100
        assert stats.ratio == pytest.approx(0.4)

    def test_service_stats_after_detection(self, service):
        """Cache hits do not add records to the stats."""
        service.detect(MUTANT_ROWS)
        service.detect(HUMAN_ROWS)
        service.detect(HUMAN_ROWS)

        stats = service.stats()
        assert stats.count_mutant_dna == 1
        assert stats.count_human_dna == 1
        assert stats.ratio == 1.0
