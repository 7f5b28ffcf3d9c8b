"""
Unit tests for pipeline manifest loading.
"""
from __future__ import annotations

import json
import unittest
from pathlib import Path

import pytest
from pydantic import ValidationError

from anime4k_build.config.manifest import (
    PassSpec,
    PipelineManifest,
    SamplerFilterMode,
    TextureOutput,
)
from anime4k_build.config.scale import RationalScale
from anime4k_build.errors import ManifestParseError

DEBLUR_YAML = """\
id: deblur_original
name: Deblur Original
description: "  Gradient based deblur  "
passes:
  - id: luma_extraction
    file: pass1_luma.wgsl
    inputs:
      - id: SOURCE
        binding: 0
    outputs:
      - id: luma
        binding: 1
        components: 1
        scale_factor: ["1", "1"]
  - id: resample
    file: pass2_resample.wgsl
    inputs:
      - id: luma
        binding: 0
    outputs:
      - id: RESULT
        binding: 2
        components: 4
        scale_factor: ["2", "1/2"]
    samplers:
      - binding: 1
      - binding: 3
        filter_mode: nearest
"""


class TestManifestFromYaml(unittest.TestCase):
    """Tests for YAML manifests."""

    def setUp(self) -> None:
        self.manifest = PipelineManifest.from_yaml(DEBLUR_YAML)

    def test_top_level_fields(self) -> None:
        self.assertEqual(self.manifest.id, "deblur_original")
        self.assertEqual(self.manifest.name, "Deblur Original")
        self.assertEqual(self.manifest.description, "Gradient based deblur")
        self.assertEqual(len(self.manifest.passes), 2)

    def test_output_scale_factors_are_rational(self) -> None:
        output = self.manifest.passes[1].outputs[0]
        self.assertEqual(output.scale, (RationalScale(2, 1), RationalScale(1, 2)))

    def test_sampler_defaults_to_linear(self) -> None:
        samplers = self.manifest.passes[1].samplers
        self.assertEqual(samplers[0].filter_mode, SamplerFilterMode.LINEAR)
        self.assertEqual(samplers[1].filter_mode, SamplerFilterMode.NEAREST)

    def test_missing_samplers_is_empty(self) -> None:
        self.assertEqual(self.manifest.passes[0].samplers, [])

    def test_bindings_lists_every_slot(self) -> None:
        self.assertEqual(self.manifest.passes[1].bindings(), [0, 2, 1, 3])

    def test_models_are_frozen(self) -> None:
        with self.assertRaises(ValidationError):
            self.manifest.id = "other"  # type: ignore[misc]


class TestManifestRejections(unittest.TestCase):
    """Tests for malformed manifests."""

    def test_three_components_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            TextureOutput(id="x", binding=0, components=3, scale_factor=("1", "1"))

    def test_bad_scale_factor_rejected(self) -> None:
        text = DEBLUR_YAML.replace('["2", "1/2"]', '["2", "1/0"]')
        with self.assertRaises(ManifestParseError):
            PipelineManifest.from_yaml(text)

    def test_unknown_key_rejected(self) -> None:
        text = DEBLUR_YAML.replace("    file: pass1_luma.wgsl", "    file: pass1_luma.wgsl\n    shader: x")
        with self.assertRaises(ManifestParseError):
            PipelineManifest.from_yaml(text)

    def test_negative_binding_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            PassSpec.model_validate(
                {"id": "p", "file": "p.wgsl", "inputs": [{"id": "SOURCE", "binding": -1}], "outputs": []}
            )

    def test_empty_document_rejected(self) -> None:
        with self.assertRaises(ManifestParseError):
            PipelineManifest.from_yaml("")

    def test_non_mapping_rejected(self) -> None:
        with self.assertRaises(ManifestParseError):
            PipelineManifest.from_yaml("- a\n- b\n")

    def test_invalid_yaml_rejected(self) -> None:
        with self.assertRaises(ManifestParseError):
            PipelineManifest.from_yaml("id: [unclosed")

    def test_invalid_json_rejected(self) -> None:
        with self.assertRaises(ManifestParseError):
            PipelineManifest.from_json("{")


def test_from_path_dispatches_on_suffix(tmp_path: Path) -> None:
    yaml_path = tmp_path / "pipeline.yaml"
    yaml_path.write_text(DEBLUR_YAML, encoding="utf-8")
    from_yaml = PipelineManifest.from_path(yaml_path)

    json_path = tmp_path / "pipeline.json"
    json_path.write_text(json.dumps(from_yaml.model_dump(mode="json")), encoding="utf-8")
    from_json = PipelineManifest.from_path(json_path)

    assert from_json == from_yaml


def test_from_path_rejects_unknown_suffix(tmp_path: Path) -> None:
    path = tmp_path / "pipeline.toml"
    path.write_text("id = 'x'", encoding="utf-8")
    with pytest.raises(ManifestParseError):
        PipelineManifest.from_path(path)


if __name__ == "__main__":
    unittest.main()
