"""Tests for the JSON-over-stdin entry point."""

import json
from io import StringIO

import pytest

from cutout_shadow.cli import build_config, main, run
from cutout_shadow.image_io import decode_image, to_data_url

from conftest import make_cutout, solid


@pytest.fixture
def request_data():
    return {
        "foregroundImageBase64": to_data_url(make_cutout(32, 32)),
        "backgroundImageBase64": to_data_url(solid(32, 32, (240, 240, 240, 255))),
        "options": {"lightAngle": 135, "lightElevation": 45},
    }


class TestBuildConfig:
    def test_suggested_values(self):
        config = build_config({"lightAngle": 30, "lightElevation": 90})
        assert config.light_angle == 30
        assert config.contact_opacity == pytest.approx(0.6)

    def test_explicit_override(self):
        config = build_config({"lightAngle": 30, "lightElevation": 90, "contactOpacity": 0.2})
        assert config.contact_opacity == 0.2

    def test_null_light_direction_uses_defaults(self):
        config = build_config({"lightAngle": None, "lightElevation": None})
        assert config.light_angle == 135
        assert config.light_elevation == 45
        assert config.contact_opacity == pytest.approx(0.75)

    def test_empty_options(self):
        config = build_config({})
        assert config.light_angle == 135
        assert config.light_elevation == 45


class TestRun:
    def test_final_render(self, request_data):
        response = run(request_data)

        assert response["ok"] is True
        assert response["processedSize"] == {"width": 32, "height": 32}
        assert response["compositeBase64"].startswith("data:image/png;base64,")
        assert decode_image(response["compositeBase64"]).shape == (32, 32, 4)
        assert decode_image(response["maskDebugBase64"]).shape == (32, 32, 4)
        assert response["shadowParams"]["light_angle"] == 135
        assert len(response["shadowParams"]["light_vector"]) == 3
        assert response["debug"]["quality"] == "final"
        assert response["debug"]["contact_points"] > 0
        json.dumps(response)

    def test_preview_render(self, request_data):
        request_data["options"].update({"quality": "preview", "previewShortSide": 16})
        response = run(request_data)

        assert response["ok"] is True
        assert response["processedSize"] == {"width": 16, "height": 16}
        assert response["debug"]["scale_factor"] == 0.5
        json.dumps(response)

    def test_missing_foreground(self, request_data):
        del request_data["foregroundImageBase64"]
        response = run(request_data)
        assert response["ok"] is False
        assert "Foreground" in response["error"]

    def test_dimension_mismatch(self, request_data):
        request_data["backgroundImageBase64"] = to_data_url(solid(16, 16, (0, 0, 0, 255)))
        response = run(request_data)
        assert response["ok"] is False
        assert "dimension mismatch" in response["error"]

    def test_normalize_dimensions(self, request_data):
        request_data["backgroundImageBase64"] = to_data_url(solid(16, 16, (0, 0, 0, 255)))
        request_data["options"]["normalizeDimensions"] = True
        response = run(request_data)
        assert response["ok"] is True
        assert response["processedSize"] == {"width": 32, "height": 32}

    def test_null_light_angle(self, request_data):
        request_data["options"]["lightAngle"] = None
        response = run(request_data)
        assert response["ok"] is True
        assert response["shadowParams"]["light_angle"] == 135

    def test_unknown_quality(self, request_data):
        request_data["options"]["quality"] = "draft"
        response = run(request_data)
        assert response["ok"] is False
        assert "draft" in response["error"]

    def test_invalid_option(self, request_data):
        request_data["options"]["lightElevation"] = 120
        response = run(request_data)
        assert response["ok"] is False
        assert "light_elevation" in response["error"]


class TestMain:
    def test_success(self, request_data):
        stdout = StringIO()
        code = main(stdin=StringIO(json.dumps(request_data)), stdout=stdout)

        assert code == 0
        assert json.loads(stdout.getvalue())["ok"] is True

    def test_invalid_json(self):
        stdout = StringIO()
        code = main(stdin=StringIO("{not json"), stdout=stdout)

        assert code == 1
        response = json.loads(stdout.getvalue())
        assert response["ok"] is False
        assert "invalid JSON" in response["error"]
