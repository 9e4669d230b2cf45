"""
Calibration Repository - PostgreSQL storage for calibrations

Storage: PostgreSQL
- view_calibrations: one row per calibration (node, ages, reference)
- calibrations: publication status
- link_calibration_fossil + view_fossils: fossil evidence
- publication_images: publication images (publication_id > 0) and
  tree images (publication_id = -calibration_id)
- fossils -> localities -> geoltime: geological time of each fossil
"""
import logging
from typing import Optional, List

import asyncpg

from models.domain.calibration import Calibration, Fossil, Image
from repositories.base import PostgresRepository

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_URL_ROOT = "https://fossilcalibrations.org/publication_image.php?id="


class CalibrationRepository(PostgresRepository):
    """
    Repository for Calibration domain model

    Read-only. Fossils and images are fetched separately so callers
    can run those lookups concurrently.
    """

    def __init__(self, db_pool: asyncpg.Pool, image_url_root: str = DEFAULT_IMAGE_URL_ROOT):
        super().__init__(db_pool)
        self.image_url_root = image_url_root

    # =========================================================================
    # HYDRATION
    # =========================================================================

    async def get_published(self, calibration_id: int, published_status: int) -> Optional[Calibration]:
        """
        Retrieve the base calibration row, only if it is published.

        Args:
            calibration_id: Calibration ID
            published_status: PublicationStatus value meaning "published"

        Returns:
            Calibration without fossils/images attached, or None
        """
        row = await self._fetchrow("Calibration lookup", """
            SELECT v.calibration_id, v.node_name, v.min_age, v.max_age, v.full_reference
            FROM view_calibrations v
            WHERE v.calibration_id = $1
              AND v.calibration_id IN (
                  SELECT c.calibration_id FROM calibrations c
                  WHERE c.publication_status = $2
              )
            LIMIT 1
        """, calibration_id, published_status)

        if not row:
            return None

        return Calibration(
            id=row['calibration_id'],
            node_name=row['node_name'],
            node_min_age=row['min_age'],
            node_max_age=row['max_age'],
            calibration_reference=row['full_reference'],
        )

    async def get_fossils(self, calibration_id: int) -> List[Fossil]:
        """Fossils linked to a calibration"""
        rows = await self._fetch("Fossil lookup", """
            SELECT f.fossil_id, f.collection_acro, f.collection_number,
                   f.short_name, f.full_reference, f.stratum,
                   f.max_age, f.max_age_type, f.max_age_type_other_details,
                   f.min_age, f.min_age_type, f.min_age_type_other_details,
                   l.fossil_location_relative_to_node
            FROM link_calibration_fossil l
            JOIN view_fossils f ON l.fossil_id = f.fossil_id
            WHERE l.calibration_id = $1
            ORDER BY f.fossil_id
        """, calibration_id)

        return [
            Fossil(
                id=row['fossil_id'],
                collection=row['collection_acro'],
                collection_number=row['collection_number'],
                short_reference=row['short_name'],
                full_reference=row['full_reference'],
                strat_unit=row['stratum'],
                max_age=row['max_age'],
                max_age_type=row['max_age_type'],
                max_age_type_details=row['max_age_type_other_details'],
                min_age=row['min_age'],
                min_age_type=row['min_age_type'],
                min_age_type_details=row['min_age_type_other_details'],
                location_relative_to_node=row['fossil_location_relative_to_node'],
            )
            for row in rows
        ]

    async def get_publication_images(self, calibration_id: int) -> List[Image]:
        """Images of the publication the calibration comes from"""
        rows = await self._fetch("Publication image lookup", """
            SELECT p.publication_id, p.caption
            FROM view_calibrations c
            JOIN publication_images p ON c.publication_id = p.publication_id
            WHERE c.calibration_id = $1
        """, calibration_id)

        return [self._image_from_row(row) for row in rows]

    async def get_tree_images(self, calibration_id: int) -> List[Image]:
        """
        Tree images for a calibration.

        Tree images share the publication_images table, keyed by the
        negated calibration ID instead of a publication ID.
        """
        rows = await self._fetch("Tree image lookup", """
            SELECT p.publication_id, p.caption
            FROM publication_images p
            WHERE p.publication_id = $1
        """, -calibration_id)

        return [self._image_from_row(row) for row in rows]

    def _image_from_row(self, row) -> Image:
        return Image.from_id(row['publication_id'], self.image_url_root, caption=row['caption'])

    # =========================================================================
    # AGE SEARCH
    # =========================================================================

    async def find_ids_by_age_range(
        self,
        min_age: Optional[float] = None,
        max_age: Optional[float] = None
    ) -> List[int]:
        """
        Calibration IDs whose node ages fall in the requested range.

        A stored age of 0 means the bound is unknown and always matches.

        Args:
            min_age: Lower bound in Ma (optional)
            max_age: Upper bound in Ma (optional)

        Returns:
            Calibration IDs (caller guarantees at least one bound is set)
        """
        clauses = []
        params = []

        if min_age is not None:
            params.append(min_age)
            n = len(params)
            clauses.append(f"(min_age >= ${n} OR min_age = 0) AND (max_age >= ${n} OR max_age = 0)")
        if max_age is not None:
            params.append(max_age)
            n = len(params)
            clauses.append(f"(min_age <= ${n} OR min_age = 0) AND (max_age <= ${n} OR max_age = 0)")

        if not clauses:
            raise ValueError("find_ids_by_age_range requires min_age or max_age")

        query = (
            "SELECT calibration_id FROM view_calibrations WHERE "
            + " AND ".join(clauses)
            + " ORDER BY calibration_id"
        )
        rows = await self._fetch("Age range search", query, *params)
        return [row['calibration_id'] for row in rows]

    async def find_ids_by_geological_time(self, era_path: str) -> List[int]:
        """
        Calibration IDs with a fossil from a matching geological time.

        Matching is a literal prefix test against 'Period,Epoch,Age', so
        'C' matches Cretaceous, Carboniferous and Cambrian alike.

        Args:
            era_path: Comma-joined Period[,Epoch[,Age]] prefix

        Returns:
            Calibration IDs
        """
        rows = await self._fetch("Geological time search", """
            SELECT DISTINCT l.calibration_id
            FROM link_calibration_fossil l
            WHERE l.fossil_id IN (
                SELECT f.fossil_id FROM fossils f
                WHERE f.locality_id IN (
                    SELECT loc.locality_id FROM localities loc
                    WHERE loc.geol_time IN (
                        SELECT g.geol_time_id FROM geoltime g
                        WHERE starts_with(concat_ws(',', g.period, g.epoch, g.age), $1)
                    )
                )
            )
            ORDER BY l.calibration_id
        """, era_path)
        return [row['calibration_id'] for row in rows]
