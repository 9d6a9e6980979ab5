"""
Tests for YAML scene files.
"""

from datetime import datetime

import pytest
import yaml

from sceneware.exceptions import SceneFileError
from sceneware.models import BoundingBox, NarrationEntry
from sceneware.scene_file import dump_entries, load_scene, parse_scene


SCENE = """
detections:
  - {label: person, confidence: 0.9, box: [100, 50, 300, 600]}
  - {label: laptop, confidence: 0.8, box: [500, 400, 200, 120]}
identities:
  - {name: Alice, box: [180, 80, 90, 110]}
  - {name: Sam, self: true, box: [0, 0, 10, 10]}
  - {name: Unknown}
"""


class TestLoadScene:

    def test_load(self, tmp_path):
        path = tmp_path / "scene.yaml"
        path.write_text(SCENE)

        scene = load_scene(path)

        assert [d.class_label for d in scene.detections] == ["person", "laptop"]
        assert scene.detections[0].bounding_box == BoundingBox(100, 50, 300, 600)
        assert scene.identities[0].name == "Alice"
        assert not scene.identities[0].is_self
        assert scene.identities[1].is_self
        assert scene.identities[2].bounding_box is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(SceneFileError, match="not found"):
            load_scene(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("detections: [unclosed")
        with pytest.raises(SceneFileError, match="Invalid YAML"):
            load_scene(path)

    def test_empty_file_is_empty_scene(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        scene = load_scene(path)
        assert scene.detections == [] and scene.identities == []

    @pytest.mark.parametrize("data", [
        ["not", "a", "mapping"],
        {"detections": {"label": "cup"}},
        {"detections": [{"label": "cup"}]},
        {"detections": [{"label": "cup", "box": [1, 2, 3]}]},
        {"detections": [{"label": "cup", "box": [1, 2, 3, "x"]}]},
        {"detections": [{"label": "cup", "confidence": "high", "box": [1, 2, 3, 4]}]},
        {"identities": ["Alice"]},
    ])
    def test_malformed(self, data):
        with pytest.raises(SceneFileError):
            parse_scene(data)

    def test_confidence_defaults_to_one(self):
        scene = parse_scene({"detections": [{"label": "cup", "box": [0, 0, 5, 5]}]})
        assert scene.detections[0].confidence == 1.0


class TestDumpEntries:

    def test_dump(self):
        entry = NarrationEntry(
            timestamp=datetime(2024, 1, 2, 3, 4, 5),
            cycle=3,
            description="I see Alice and a laptop",
            labels=["Alice", "laptop"],
            detection_count=2,
            backend="cpu",
            spoken=True,
        )

        data = yaml.safe_load(dump_entries([entry]))

        assert data["narrations"][0] == {
            "timestamp": "2024-01-02T03:04:05",
            "cycle": 3,
            "description": "I see Alice and a laptop",
            "labels": ["Alice", "laptop"],
            "detections": 2,
            "backend": "cpu",
            "spoken": True,
        }

    def test_dump_empty(self):
        assert yaml.safe_load(dump_entries([])) == {"narrations": []}
