"""
Scene Files

YAML description of a single detection cycle, used for offline narration
and for seeding the identity registry:

    detections:
      - {label: person, confidence: 0.9, box: [100, 50, 300, 600]}
      - {label: laptop, confidence: 0.8, box: [500, 400, 200, 120]}
    identities:
      - {name: Alice, self: false, box: [180, 80, 90, 110]}

Boxes are ``[x, y, width, height]`` in pixels.

Usage:
    from sceneware.scene_file import load_scene

    scene = load_scene("kitchen.yaml")
    print(narrator.describe(scene.detections, scene.identities))
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

import yaml

from .exceptions import SceneFileError
from .models import (
    UNKNOWN_NAME,
    BoundingBox,
    Detection,
    NarrationEntry,
    RecognizedIdentity,
)

logger = logging.getLogger(__name__)


@dataclass
class Scene:
    """Detections and identities of one cycle."""
    detections: List[Detection] = field(default_factory=list)
    identities: List[RecognizedIdentity] = field(default_factory=list)


def _parse_box(raw: Any, where: str) -> BoundingBox:
    if not isinstance(raw, (list, tuple)) or len(raw) != 4:
        raise SceneFileError(f"{where}: box must be [x, y, width, height], got {raw!r}")
    try:
        return BoundingBox.from_list(raw)
    except (TypeError, ValueError) as e:
        raise SceneFileError(f"{where}: invalid box {raw!r}") from e


def _parse_detection(raw: Any, index: int) -> Detection:
    where = f"detections[{index}]"
    if not isinstance(raw, dict):
        raise SceneFileError(f"{where}: expected a mapping")
    if "label" not in raw or "box" not in raw:
        raise SceneFileError(f"{where}: 'label' and 'box' are required")

    try:
        confidence = float(raw.get("confidence", 1.0))
    except (TypeError, ValueError) as e:
        raise SceneFileError(f"{where}: invalid confidence {raw.get('confidence')!r}") from e

    return Detection(
        class_label=str(raw["label"]),
        confidence=confidence,
        bounding_box=_parse_box(raw["box"], where),
    )


def _parse_identity(raw: Any, index: int) -> RecognizedIdentity:
    where = f"identities[{index}]"
    if not isinstance(raw, dict):
        raise SceneFileError(f"{where}: expected a mapping")

    box = raw.get("box")
    return RecognizedIdentity(
        name=str(raw.get("name", UNKNOWN_NAME)),
        is_self=bool(raw.get("self", False)),
        bounding_box=_parse_box(box, where) if box is not None else None,
    )


def parse_scene(data: Any) -> Scene:
    """Build a Scene from already-loaded YAML data."""
    if data is None:
        return Scene()
    if not isinstance(data, dict):
        raise SceneFileError("Scene must be a mapping with 'detections' and 'identities'")

    detections = data.get("detections") or []
    identities = data.get("identities") or []
    if not isinstance(detections, list) or not isinstance(identities, list):
        raise SceneFileError("'detections' and 'identities' must be lists")

    return Scene(
        detections=[_parse_detection(d, i) for i, d in enumerate(detections)],
        identities=[_parse_identity(d, i) for i, d in enumerate(identities)],
    )


def load_scene(path: Union[str, Path]) -> Scene:
    """
    Load a scene file.

    Raises:
        SceneFileError: when the file is missing, not YAML, or malformed
    """
    scene_path = Path(path)
    if not scene_path.exists():
        raise SceneFileError(f"Scene file not found: {scene_path}")

    try:
        with open(scene_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SceneFileError(f"Invalid YAML in {scene_path}: {e}") from e

    scene = parse_scene(data)
    logger.debug(
        f"Loaded scene {scene_path}: {len(scene.detections)} detections, "
        f"{len(scene.identities)} identities"
    )
    return scene


def dump_entries(entries: Iterable[NarrationEntry]) -> str:
    """Serialize narration history as YAML."""
    data: Dict[str, Any] = {"narrations": [entry.to_dict() for entry in entries]}
    return yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
