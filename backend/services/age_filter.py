"""
Age filter - calibration IDs by age range or geological era
"""
import logging
from typing import List, Optional

from repositories.calibration_repository import CalibrationRepository
from services.errors import InvalidCriteria

logger = logging.getLogger(__name__)


class AgeFilterResolver:
    """Shapes age/era criteria into store predicates and returns matching IDs."""

    def __init__(self, calibrations: CalibrationRepository):
        self.calibrations = calibrations

    async def resolve_by_age_range(
        self,
        min_age: Optional[float] = None,
        max_age: Optional[float] = None
    ) -> List[int]:
        """
        Calibration IDs within an age range.

        Args:
            min_age: Lower bound in Ma
            max_age: Upper bound in Ma

        Returns:
            Matching calibration IDs

        Raises:
            InvalidCriteria: neither bound given
        """
        if min_age is None and max_age is None:
            raise InvalidCriteria("Cannot find by age unless minAge or maxAge is specified")

        ids = await self.calibrations.find_ids_by_age_range(min_age=min_age, max_age=max_age)
        logger.debug(f"Age range [{min_age}, {max_age}] matched {len(ids)} calibrations")
        return ids

    async def resolve_by_era(self, era_path: Optional[str]) -> List[int]:
        """
        Calibration IDs for a geological time prefix like 'Neogene,Miocene'.

        Raises:
            InvalidCriteria: empty era path
        """
        if not era_path:
            raise InvalidCriteria("Cannot find by geological time unless a time period is specified")

        ids = await self.calibrations.find_ids_by_geological_time(era_path)
        logger.debug(f"Geological time '{era_path}' matched {len(ids)} calibrations")
        return ids
