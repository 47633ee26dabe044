from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from adapters.filesystem.json_utils import load_records
from domain.models import Resource
from domain.ports.repositories import FacilityCatalog

logger = logging.getLogger(__name__)


class FileSystemFacilityCatalog(FacilityCatalog):
    def __init__(self, path: Path) -> None:
        self.path = path

    def load_all(self) -> List[Resource]:
        resources = [
            Resource.model_validate(item) for item in load_records(self.path, "resources")
        ]
        logger.debug("Loaded %d facilities from %s", len(resources), self.path)
        return resources

    def get(self, facility_id: str) -> Resource:
        for resource in self.load_all():
            if resource.id == facility_id:
                return resource
        raise KeyError(facility_id)
