from __future__ import annotations

import pytest
from faker import Faker

from partbom.bom_engine.services.bom_service import BOMService
from partbom.bom_engine.services.bom_tree_service import BOMTreeService
from partbom.bom_engine.services.part_service import PartService
from partbom.seeder import BaseSeeder, SeederRegistry
from partbom.seeder.demo.random_bom import RandomBOMSeeder
from partbom.seeder.demo.sample_bom import SampleBOMSeeder
from partbom.models import BOMLink, Part


def test_registry_orders_by_priority():
    names = SeederRegistry.names()

    assert names.index("SampleBOMSeeder") < names.index("RandomBOMSeeder")


def test_sample_seeder_builds_cart_assembly(session):
    completed = SeederRegistry.run_all(session, fake=Faker())

    assert completed == ["SampleBOMSeeder"]
    assert session.query(Part).count() == 21
    assert session.query(BOMLink).count() == 20

    root = PartService(session).get_by_part_number("prt-000001")
    assert root.name == "Autonomous Cart Assembly"

    response = BOMTreeService(session).get_tree(root.id, depth="all")
    assert response.node_count == 21
    assert [c.part.name for c in response.tree.children] == [
        "Mechanical Module",
        "Electrical Module",
        "Controls Module",
    ]

    assert PartService(session).create_part(name="Next").part_number == "PRT-000022"


def test_sample_seeder_skips_populated_database(session):
    PartService(session).create_part(name="Existing")
    session.commit()

    SampleBOMSeeder(session).run()

    assert session.query(Part).count() == 1


def test_random_seeder_keeps_graph_acyclic(session):
    seeder = RandomBOMSeeder(session, Faker())
    seeder.part_count = 12

    seeder.run()
    session.commit()

    assert session.query(Part).count() == 12
    bom = BOMService(session)
    for link in session.query(BOMLink).all():
        assert not bom.is_reachable(link.child_id, link.parent_id)


def test_optional_seeder_runs_only_when_included(session):
    completed = SeederRegistry.run_all(session, include=["RandomBOMSeeder"])

    assert completed == ["SampleBOMSeeder", "RandomBOMSeeder"]
    assert session.query(Part).count() == 21 + RandomBOMSeeder.part_count


def test_failing_seeder_is_rolled_back_and_reraised(session, monkeypatch):
    class BrokenSeeder(BaseSeeder):
        priority = 700

        def run(self):
            PartService(self.session).create_part(name="Half-written")
            raise RuntimeError("data file corrupt")

    monkeypatch.setattr(SeederRegistry, "_seeders", [SampleBOMSeeder, BrokenSeeder])

    with pytest.raises(RuntimeError, match="data file corrupt"):
        SeederRegistry.run_all(session)

    assert session.query(Part).count() == 21
    assert PartService(session).get_by_part_number("PRT-000022") is None
