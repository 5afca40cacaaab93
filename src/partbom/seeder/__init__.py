from .base import BaseSeeder
from .registry import SeederRegistry

# Import sub-modules to ensure they register themselves when 'seeder' is imported
# Order here doesn't determine execution order (priority does), but importing is required.

# Sample (Priority 500-599)
from .demo import sample_bom

# Generated (Priority 600+, optional)
from .demo import random_bom

__all__ = ["BaseSeeder", "SeederRegistry"]
