from __future__ import annotations

from partbom.bom_engine.services.part_service import PartService
from partbom.bom_engine.services.sequence_service import (
    AUDIT_ID,
    PART_ID,
    PART_NUMBER,
    SequenceService,
)
from partbom.models import IdSequence


def test_family_format_and_parse():
    assert PART_ID.format(7) == "PART-0007"
    assert PART_NUMBER.format(12) == "PRT-000012"
    assert AUDIT_ID.format(3) == "AUD-000003"

    assert PART_NUMBER.parse("PRT-000042") == 42
    assert PART_NUMBER.parse("PRT-1234567") == 1234567
    assert PART_NUMBER.parse("ABC-12") is None
    assert PART_NUMBER.parse(None) is None
    assert PART_ID.parse("PRT-000001") is None


def test_allocate_skips_existing_candidates(session):
    sequences = SequenceService(session)
    taken = {"PRT-000001", "PRT-000002"}

    value = sequences.allocate(PART_NUMBER, exists=lambda candidate: candidate in taken)

    assert value == "PRT-000003"
    assert sequences.peek(PART_NUMBER) == 4


def test_counter_is_rederived_from_records(session):
    service = PartService(session)
    service.create_part(name="A", part_number="PRT-000007")
    session.query(IdSequence).delete()
    session.flush()

    assert SequenceService(session).peek(PART_NUMBER) == 8


def test_sync_from_records_never_moves_back(session):
    service = PartService(session)
    service.create_part(name="A")
    service.create_part(name="B")

    sequences = SequenceService(session)
    row = session.get(IdSequence, PART_NUMBER.name)
    row.next_value = 10
    session.flush()

    counters = sequences.sync_from_records()

    assert counters["PRT"] == 10
    assert counters["PART"] == 3
    assert counters["AUD"] == 3


def test_sync_from_records_advances_behind_counters(session):
    service = PartService(session)
    service.create_part(name="A")
    row = session.get(IdSequence, PART_NUMBER.name)
    row.next_value = 1
    session.flush()

    counters = SequenceService(session).sync_from_records()

    assert counters["PRT"] == 2
