import logging
import random

from partbom.bom_engine.services.bom_service import BOMService
from partbom.exceptions import ConflictError, CycleError
from partbom.seeder.base import BaseSeeder
from partbom.seeder.registry import SeederRegistry

logger = logging.getLogger(__name__)

@SeederRegistry.register
class RandomBOMSeeder(BaseSeeder):
    """Seeds random parts and BOM links; candidate links that would cycle are dropped."""
    priority = 600  # Run after the sample BOM (500)
    optional = True

    part_count = 30
    links_per_assembly = (2, 5)

    def run(self):
        bom = BOMService(self.session)

        self.log(f"Generating {self.part_count} demo parts...")
        parts = []
        for _ in range(self.part_count):
            parts.append(
                bom.parts.create_part(
                    name=self.fake.catch_phrase(),
                    description=self.fake.sentence(nb_words=8),
                )
            )

        # Randomly select 30% of parts as assemblies
        assemblies = random.sample(parts, k=max(1, int(len(parts) * 0.3)))

        created = 0
        skipped = 0
        for parent in assemblies:
            potential_children = [p for p in parts if p.id != parent.id]
            low, high = self.links_per_assembly
            children = random.sample(
                potential_children, k=min(len(potential_children), random.randint(low, high))
            )
            for child in children:
                try:
                    bom.create_link(parent.id, child.id, random.randint(1, 10))
                    created += 1
                except (CycleError, ConflictError) as exc:
                    logger.debug(f"Skipped {parent.part_number} -> {child.part_number}: {exc}")
                    skipped += 1

        self.log(f"Generated {created} BOM links ({skipped} rejected candidates).")
