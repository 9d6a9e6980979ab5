"""
Person/Face Geometry

Spatial tests used to decide whether a face box belongs to a person box.
A person box covers the whole body while a face box covers only the head,
so containment and head-area tests carry more weight than raw distance.
"""

from dataclasses import dataclass

from ..models import BoundingBox

HEAD_AREA_FRACTION = 0.4       # top share of the person box treated as head
MAX_DISTANCE_FACTOR = 0.8      # of the person box's longer side

FACE_IN_BOX_DISCOUNT = 0.5
HEAD_AREA_DISCOUNT = 0.7
OVERLAP_DISCOUNT = 0.6


@dataclass(frozen=True)
class SpatialMatch:
    """Geometric relation between one person box and one face box."""
    distance: float
    max_distance: float
    face_in_person_box: bool
    boxes_overlap: bool
    face_in_head_area: bool

    @property
    def eligible(self) -> bool:
        return (
            self.face_in_person_box
            or self.boxes_overlap
            or self.face_in_head_area
            or self.distance < self.max_distance
        )

    @property
    def score(self) -> float:
        """Center distance discounted by each geometric hint that holds."""
        score = self.distance
        if self.face_in_person_box:
            score *= FACE_IN_BOX_DISCOUNT
        if self.face_in_head_area:
            score *= HEAD_AREA_DISCOUNT
        if self.boxes_overlap:
            score *= OVERLAP_DISCOUNT
        return score


def face_in_head_area(person: BoundingBox, face: BoundingBox) -> bool:
    """Face center height lies within the top HEAD_AREA_FRACTION of the person box."""
    _, face_y = face.center
    return person.y <= face_y <= person.y + person.height * HEAD_AREA_FRACTION


def measure(person: BoundingBox, face: BoundingBox) -> SpatialMatch:
    """Compute all spatial relations between a person box and a face box."""
    return SpatialMatch(
        distance=person.distance_to(face),
        max_distance=MAX_DISTANCE_FACTOR * max(person.width, person.height),
        face_in_person_box=person.contains(face.center),
        boxes_overlap=person.overlaps(face),
        face_in_head_area=face_in_head_area(person, face),
    )
