"""
Unit tests for the full compile pipeline.
"""
from __future__ import annotations

import json
import unittest
from pathlib import Path

import pytest

from anime4k_build.compiler import SOURCE_TEXTURE_ID, Compiler
from anime4k_build.config.manifest import PipelineManifest, SamplerFilterMode
from anime4k_build.config.scale import RationalScale
from anime4k_build.errors import NoPassesError, ShaderLoadError

UPSCALE_YAML = """\
id: upscale_test
name: Upscale Test
description: Luma, upscale, sharpen
passes:
  - id: luma
    file: luma.wgsl
    inputs:
      - id: SOURCE
        binding: 0
    outputs:
      - id: luma
        binding: 1
        components: 1
        scale_factor: ["1", "1"]
  - id: kernel_x
    file: kernel_x.wgsl
    inputs:
      - id: luma
        binding: 0
    outputs:
      - id: kernel_x
        binding: 1
        components: 1
        scale_factor: ["1", "1"]
  - id: kernel_y
    file: kernel_y.wgsl
    inputs:
      - id: kernel_x
        binding: 0
    outputs:
      - id: kernel_y
        binding: 1
        components: 1
        scale_factor: ["1", "1"]
  - id: upscale
    file: upscale.wgsl
    inputs:
      - id: SOURCE
        binding: 0
      - id: kernel_y
        binding: 1
    outputs:
      - id: RESULT
        binding: 2
        components: 4
        scale_factor: ["2", "2"]
    samplers:
      - binding: 3
      - binding: 4
        filter_mode: nearest
      - binding: 5
"""


class RecordingLoader:
    """Shader loader that remembers what it was asked for."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def __call__(self, filename: str) -> str:
        self.calls.append(filename)
        return f"// {filename}"


class TestCompiler(unittest.TestCase):
    """Tests for Compiler.compile()."""

    def setUp(self) -> None:
        self.manifest = PipelineManifest.from_yaml(UPSCALE_YAML)
        self.loader = RecordingLoader()
        self.pipeline = Compiler().compile(self.manifest, self.loader)

    def test_identity(self) -> None:
        self.assertEqual(self.pipeline.id, "upscale_test")
        self.assertEqual(self.pipeline.name, "Upscale Test")
        self.assertEqual(self.pipeline.description, "Luma, upscale, sharpen")

    def test_loader_called_once_per_pass_in_order(self) -> None:
        self.assertEqual(
            self.loader.calls, ["luma.wgsl", "kernel_x.wgsl", "kernel_y.wgsl", "upscale.wgsl"]
        )
        self.assertEqual(self.pipeline.passes[2].shader, "// kernel_y.wgsl")

    def test_chain_reuses_textures(self) -> None:
        """luma dies before kernel_y is created, so they share a slot."""
        ids = {
            b.logical_id: b.physical_id
            for p in self.pipeline.passes
            for b in p.output_textures
        }
        self.assertEqual(ids["luma"], 0)
        self.assertEqual(ids["kernel_x"], 1)
        self.assertEqual(ids["kernel_y"], 0)
        self.assertEqual(ids["RESULT"], 2)
        self.assertEqual(len(self.pipeline.physical_textures), 4)

    def test_source_input_binding(self) -> None:
        source = self.pipeline.passes[0].input_textures[0]
        self.assertEqual(source.logical_id, "SOURCE")
        self.assertEqual(source.physical_id, SOURCE_TEXTURE_ID)
        self.assertEqual(source.components, 4)
        self.assertEqual(source.scale_factor, (RationalScale(1), RationalScale(1)))

    def test_input_shape_comes_from_producer(self) -> None:
        kernel_y = self.pipeline.passes[3].input_textures[1]
        self.assertEqual(kernel_y.logical_id, "kernel_y")
        self.assertEqual(kernel_y.components, 1)
        self.assertEqual(kernel_y.binding, 1)

    def test_compute_scale_from_first_output(self) -> None:
        self.assertEqual(self.pipeline.passes[0].compute_scale_factors, (1.0, 1.0))
        self.assertEqual(self.pipeline.passes[3].compute_scale_factors, (2.0, 2.0))

    def test_required_samplers_deduplicated_in_order(self) -> None:
        self.assertEqual(
            self.pipeline.required_samplers,
            (SamplerFilterMode.LINEAR, SamplerFilterMode.NEAREST),
        )
        self.assertEqual(len(self.pipeline.passes[3].samplers), 3)

    def test_result_queries(self) -> None:
        self.assertEqual(self.pipeline.source_texture_id(), SOURCE_TEXTURE_ID)
        self.assertEqual(self.pipeline.result_texture_id(), 2)
        self.assertEqual(
            self.pipeline.final_scale_factor(), (RationalScale(2), RationalScale(2))
        )

    def test_manifest_not_modified(self) -> None:
        self.assertEqual(self.manifest, PipelineManifest.from_yaml(UPSCALE_YAML))

    def test_validation_runs_first(self) -> None:
        empty = self.manifest.model_copy(update={"passes": []})
        loader = RecordingLoader()
        with self.assertRaises(NoPassesError):
            Compiler().compile(empty, loader)
        self.assertEqual(loader.calls, [])

    def test_loader_failure_is_wrapped(self) -> None:
        def failing(filename: str) -> str:
            if filename == "kernel_x.wgsl":
                raise FileNotFoundError(filename)
            return ""

        with self.assertRaises(ShaderLoadError) as ctx:
            Compiler().compile(self.manifest, failing)
        self.assertEqual(ctx.exception.pass_index, 1)
        self.assertEqual(ctx.exception.pass_id, "kernel_x")
        self.assertEqual(ctx.exception.filename, "kernel_x.wgsl")
        self.assertIsInstance(ctx.exception.cause, FileNotFoundError)


class TestCompiledPipelineExport(unittest.TestCase):
    """Tests for the serialized form."""

    def setUp(self) -> None:
        manifest = PipelineManifest.from_yaml(UPSCALE_YAML)
        self.pipeline = Compiler().compile(manifest, lambda name: "")
        self.data = self.pipeline.to_dict()

    def test_top_level_keys(self) -> None:
        self.assertEqual(
            list(self.data),
            ["id", "name", "description", "physical_textures", "passes", "required_samplers"],
        )
        self.assertEqual(self.data["required_samplers"], ["linear", "nearest"])

    def test_source_texture_entry(self) -> None:
        source = self.data["physical_textures"][0]  # type: ignore[index]
        self.assertEqual(
            source,
            {
                "id": SOURCE_TEXTURE_ID,
                "components": 4,
                "scale_factor": [
                    {"numerator": 1, "denominator": 1},
                    {"numerator": 1, "denominator": 1},
                ],
                "is_source": True,
            },
        )

    def test_pass_entry(self) -> None:
        last = self.data["passes"][3]  # type: ignore[index]
        self.assertEqual(last["id"], "upscale")
        self.assertEqual(last["compute_scale_factors"], [2.0, 2.0])
        self.assertEqual(last["samplers"][1], {"binding": 4, "filter_mode": "nearest"})
        self.assertEqual(last["output_textures"][0]["logical_id"], "RESULT")

    def test_json_round_trip(self) -> None:
        self.assertEqual(json.loads(self.pipeline.to_json()), self.data)


def test_save_creates_parent_directories(tmp_path: Path) -> None:
    manifest = PipelineManifest.from_yaml(UPSCALE_YAML)
    pipeline = Compiler().compile(manifest, lambda name: "")
    target = tmp_path / "out" / "pipeline.json"
    pipeline.save(target)
    assert json.loads(target.read_text(encoding="utf-8"))["id"] == "upscale_test"


def test_compiler_is_reusable() -> None:
    compiler = Compiler()
    manifest = PipelineManifest.from_yaml(UPSCALE_YAML)
    first = compiler.compile(manifest, lambda name: name)
    second = compiler.compile(manifest, lambda name: name)
    assert first == second


@pytest.mark.parametrize("missing", ["luma.wgsl", "upscale.wgsl"])
def test_any_pass_can_fail_to_load(missing: str) -> None:
    def loader(filename: str) -> str:
        if filename == missing:
            raise PermissionError(filename)
        return ""

    with pytest.raises(ShaderLoadError, match=missing):
        Compiler().compile(PipelineManifest.from_yaml(UPSCALE_YAML), loader)


if __name__ == "__main__":
    unittest.main()
