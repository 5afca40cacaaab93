from partbom.bom_engine.services.bom_service import BOMService
from partbom.models.part import Part
from partbom.seeder.file_loader import BaseFileSeeder
from partbom.seeder.registry import SeederRegistry

@SeederRegistry.register
class SampleBOMSeeder(BaseFileSeeder):
    """Seeds the Autonomous Cart Assembly sample through the BOM services."""
    priority = 500
    data_file = "sample_bom.json"

    def run(self):
        if self.session.query(Part).count() > 0:
            self.log("Parts already exist. Skipping sample BOM.")
            return

        data = self.load_json(self.data_file)
        bom = BOMService(self.session)

        ids_by_key = {}
        for entry in data.get("parts", []):
            part = bom.parts.create_part(
                name=entry["name"],
                part_number=entry.get("partNumber"),
                description=entry.get("description"),
            )
            ids_by_key[entry["key"]] = part.id

        for entry in data.get("links", []):
            bom.create_link(
                ids_by_key[entry["parent"]],
                ids_by_key[entry["child"]],
                entry.get("quantity", 1),
            )

        self.log(
            f"Inserted {len(ids_by_key)} parts and {len(data.get('links', []))} BOM links."
        )
