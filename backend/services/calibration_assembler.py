"""
Calibration assembler - IDs to fully populated calibrations
"""
import asyncio
import dataclasses
import logging
from typing import List, Optional, Sequence

from models.domain.calibration import Calibration
from repositories.calibration_repository import CalibrationRepository

logger = logging.getLogger(__name__)


class CalibrationAssembler:
    """
    Hydrates calibrations with their fossils and images.

    Only published calibrations are ever returned; anything else reads
    as None, exactly like a missing ID.
    """

    def __init__(self, calibrations: CalibrationRepository, published_status: int = 4):
        self.calibrations = calibrations
        self.published_status = published_status

    async def assemble_one(self, calibration_id: int) -> Optional[Calibration]:
        """
        Fetch one calibration with fossils, publication images and tree images.

        Returns:
            Calibration, or None if it does not exist or is unpublished
        """
        calibration = await self.calibrations.get_published(calibration_id, self.published_status)
        if calibration is None:
            logger.debug(f"Calibration {calibration_id} not found or unpublished")
            return None

        fossils, publication_images, tree_images = await asyncio.gather(
            self.calibrations.get_fossils(calibration_id),
            self.calibrations.get_publication_images(calibration_id),
            self.calibrations.get_tree_images(calibration_id),
        )

        return dataclasses.replace(
            calibration,
            fossils=fossils,
            publication_images=publication_images,
            tree_images=tree_images,
        )

    async def assemble(self, calibration_ids: Sequence[int]) -> List[Optional[Calibration]]:
        """
        Assemble many calibrations concurrently.

        Returns:
            One entry per input ID, in input order (None where not found)
        """
        if not calibration_ids:
            return []
        return list(await asyncio.gather(*(self.assemble_one(i) for i in calibration_ids)))
