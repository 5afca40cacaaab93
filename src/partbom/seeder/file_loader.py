import os
import json
from typing import Any, Dict
from partbom.seeder.base import BaseSeeder

class BaseFileSeeder(BaseSeeder):
    """
    Base class for seeding data from local JSON files.
    Expects data files to be in src/partbom/seeder/data/
    """

    @property
    def data_dir(self):
        current_dir = os.path.dirname(os.path.abspath(__file__))
        return os.path.join(current_dir, 'data')

    def load_json(self, filename: str) -> Dict[str, Any]:
        """Load a JSON document from the data directory; missing file yields {}."""
        file_path = os.path.join(self.data_dir, filename)
        if not os.path.exists(file_path):
            self.log(f"Warning: Data file not found at {file_path}")
            return {}

        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        self.log(f"Loaded {filename}")
        return data
