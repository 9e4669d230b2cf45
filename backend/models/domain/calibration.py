"""
Calibration domain model

A calibration is a dated constraint on the age of a phylogenetic node,
backed by fossil and publication evidence. Calibrations are only ever
hydrated from the store (see CalibrationAssembler); this service never
writes them.
"""
from dataclasses import dataclass, field
from typing import Optional, List


@dataclass(frozen=True)
class Fossil:
    """Fossil evidence attached to a calibration (via the calibration-fossil link)"""
    id: int
    collection: Optional[str] = None
    collection_number: Optional[str] = None
    short_reference: Optional[str] = None
    full_reference: Optional[str] = None
    strat_unit: Optional[str] = None
    max_age: Optional[float] = None
    max_age_type: Optional[str] = None
    max_age_type_details: Optional[str] = None
    min_age: Optional[float] = None
    min_age_type: Optional[str] = None
    min_age_type_details: Optional[str] = None
    location_relative_to_node: Optional[str] = None  # crown, stem, outside...

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "collection": self.collection,
            "collectionNumber": self.collection_number,
            "shortReference": self.short_reference,
            "fullReference": self.full_reference,
            "stratUnit": self.strat_unit,
            "maxAge": self.max_age,
            "maxAgeType": self.max_age_type,
            "maxAgeTypeDetails": self.max_age_type_details,
            "minAge": self.min_age,
            "minAgeType": self.min_age_type,
            "minAgeTypeDetails": self.min_age_type_details,
            "locationRelativeToNode": self.location_relative_to_node,
        }


@dataclass(frozen=True)
class Image:
    """
    Publication or tree image.

    Both kinds live in the same table. Publication images are keyed by the
    publication ID, tree images by the negated calibration ID, so `id` may
    be negative for tree images.
    """
    id: int
    url: str
    caption: Optional[str] = None

    @classmethod
    def from_id(cls, image_id: int, url_root: str, caption: Optional[str] = None) -> 'Image':
        return cls(id=image_id, url=f"{url_root}{image_id}", caption=caption)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "url": self.url,
            "caption": self.caption,
        }


@dataclass(frozen=True)
class Calibration:
    """
    Calibration domain model - storage-agnostic representation

    Storage: PostgreSQL (view_calibrations + link/image tables)

    Immutable: the assembler builds the base record first and attaches
    fossils and images with dataclasses.replace().
    """
    id: int
    node_name: Optional[str] = None
    node_min_age: Optional[float] = None
    node_max_age: Optional[float] = None
    calibration_reference: Optional[str] = None

    fossils: List[Fossil] = field(default_factory=list)
    publication_images: List[Image] = field(default_factory=list)
    tree_images: List[Image] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "nodeName": self.node_name,
            "nodeMinAge": self.node_min_age,
            "nodeMaxAge": self.node_max_age,
            "calibrationReference": self.calibration_reference,
            "fossils": [f.to_dict() for f in self.fossils],
            "publicationImages": [i.to_dict() for i in self.publication_images],
            "treeImages": [i.to_dict() for i in self.tree_images],
        }
