"""
Unit tests for the hook-format parser.
"""
from __future__ import annotations

import unittest

from anime4k_build.errors import HookParseError, UnknownTextureError
from anime4k_build.hook.parse import (
    HookParser,
    StageKind,
    new_scale_factor_map,
    split_hooks,
)

CONV_HOOK = """\
//!DESC Anime4K-v4.0-Upscale-CNN-x2-(S)-Conv-4x3x3x3
//!HOOK MAIN
//!BIND MAIN
//!SAVE conv2d_tf
//!WIDTH MAIN.w
//!HEIGHT MAIN.h
//!COMPONENTS 4
//!WHEN OUTPUT.w MAIN.w / 1.200 > OUTPUT.h MAIN.h / 1.200 > *
#define go_0(x_off, y_off) (MAIN_texOff(vec2(x_off, y_off)))
vec4 hook() {
    vec4 result = mat4(1.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0, 1.0) * go_0(0.0, 0.0);
    return result;
}
"""

DEPTH_TO_SPACE_HOOK = """\
//!DESC Anime4K-v4.0-Upscale-CNN-x2-(S)-Depth-to-Space
//!HOOK MAIN
//!BIND MAIN
//!BIND conv2d_tf
//!SAVE MAIN
//!WIDTH conv2d_tf.w 2 *
//!HEIGHT conv2d_tf.h 2 *
//!COMPONENTS 4
vec4 hook() {
    return vec4(0.0);
}
"""


class TestSplitHooks(unittest.TestCase):
    """Tests for splitting a blob into hook blocks."""

    def test_splits_on_desc_lines(self) -> None:
        blocks = split_hooks(CONV_HOOK + DEPTH_TO_SPACE_HOOK)
        self.assertEqual(len(blocks), 2)
        self.assertTrue(blocks[0].startswith("//!DESC Anime4K-v4.0-Upscale-CNN-x2-(S)-Conv"))
        self.assertTrue(blocks[1].startswith("//!DESC Anime4K-v4.0-Upscale-CNN-x2-(S)-Depth"))

    def test_preamble_is_dropped(self) -> None:
        blocks = split_hooks("// MIT License\n// Copyright\n\n" + CONV_HOOK)
        self.assertEqual(len(blocks), 1)
        self.assertNotIn("MIT License", blocks[0])

    def test_lines_kept_verbatim(self) -> None:
        self.assertEqual(split_hooks(CONV_HOOK), [CONV_HOOK])

    def test_no_hooks(self) -> None:
        self.assertEqual(split_hooks("// nothing here\n"), [])


class TestParseHook(unittest.TestCase):
    """Tests for resolving directives of a single hook."""

    def setUp(self) -> None:
        self.parser = HookParser()
        self.scale_map = new_scale_factor_map()

    def test_conv_hook(self) -> None:
        hook = self.parser.parse_hook(CONV_HOOK, self.scale_map)
        self.assertEqual(hook.kind, StageKind.CONV)
        self.assertEqual(hook.name, "Anime4K-v4.0-Upscale-CNN-x2-(S)-Conv-4x3x3x3")
        self.assertEqual(hook.inputs, ("source",))
        self.assertEqual(hook.output, "conv2d_tf")
        self.assertEqual(hook.scale_factor, 1)
        self.assertTrue(hook.needs_bound)
        self.assertFalse(hook.needs_sampler)

    def test_directives_are_not_code(self) -> None:
        hook = self.parser.parse_hook(CONV_HOOK, self.scale_map)
        self.assertNotIn("//!", hook.code)
        self.assertIn("#define go_0", hook.code)

    def test_output_scale_is_registered(self) -> None:
        self.parser.parse_hook(CONV_HOOK, self.scale_map)
        self.assertEqual(self.scale_map["conv2d_tf"], 1)

    def test_multiplied_scale_registered_for_save_name(self) -> None:
        """`WIDTH MAIN.w 2 *` registers scale 2 under the SAVE name."""
        block = CONV_HOOK.replace("//!WIDTH MAIN.w", "//!WIDTH MAIN.w 2 *").replace(
            "//!HEIGHT MAIN.h", "//!HEIGHT MAIN.h 2 *"
        )
        hook = self.parser.parse_hook(block, self.scale_map)
        self.assertEqual(hook.scale_factor, 2)
        self.assertEqual(self.scale_map["conv2d_tf"], 2)
        self.assertTrue(hook.needs_sampler)
        self.assertFalse(hook.needs_bound)

    def test_depth_to_space_hook(self) -> None:
        self.parser.parse_hook(CONV_HOOK, self.scale_map)
        hook = self.parser.parse_hook(DEPTH_TO_SPACE_HOOK, self.scale_map, index=1)
        self.assertEqual(hook.kind, StageKind.DEPTH_TO_SPACE)
        self.assertEqual(hook.inputs, ("source", "conv2d_tf"))
        self.assertEqual(hook.output, "dest")
        self.assertEqual(hook.scale_factor, 2)
        self.assertEqual(self.scale_map["dest"], 2)

    def test_unknown_scale_base(self) -> None:
        with self.assertRaises(UnknownTextureError) as ctx:
            self.parser.parse_hook(DEPTH_TO_SPACE_HOOK, self.scale_map)
        self.assertEqual(ctx.exception.texture, "conv2d_tf")

    def test_unknown_input(self) -> None:
        block = CONV_HOOK.replace("//!BIND MAIN", "//!BIND MAIN\n//!BIND conv2d_tf_missing")
        with self.assertRaises(UnknownTextureError) as ctx:
            self.parser.parse_hook(block, self.scale_map)
        self.assertEqual(ctx.exception.texture, "conv2d_tf_missing")

    def test_failed_hook_registers_nothing(self) -> None:
        block = CONV_HOOK.replace("//!BIND MAIN\n", "")
        with self.assertRaises(HookParseError):
            self.parser.parse_hook(block, self.scale_map)
        self.assertNotIn("conv2d_tf", self.scale_map)

    def test_inconsistent_width_and_height(self) -> None:
        block = CONV_HOOK.replace("//!HEIGHT MAIN.h", "//!HEIGHT MAIN.h 2 *")
        with self.assertRaises(HookParseError):
            self.parser.parse_hook(block, self.scale_map)

    def test_malformed_scale_line(self) -> None:
        block = CONV_HOOK.replace("//!WIDTH MAIN.w", "//!WIDTH MAIN.w * 2")
        with self.assertRaises(HookParseError) as ctx:
            self.parser.parse_hook(block, self.scale_map, index=4)
        self.assertEqual(ctx.exception.hook_index, 4)
        self.assertEqual(ctx.exception.line, "//!WIDTH MAIN.w * 2")

    def test_missing_scale(self) -> None:
        block = CONV_HOOK.replace("//!WIDTH MAIN.w\n", "").replace("//!HEIGHT MAIN.h\n", "")
        with self.assertRaises(HookParseError):
            self.parser.parse_hook(block, self.scale_map)

    def test_missing_output(self) -> None:
        block = CONV_HOOK.replace("//!SAVE conv2d_tf\n", "")
        with self.assertRaises(HookParseError):
            self.parser.parse_hook(block, self.scale_map)

    def test_unknown_stage_kind(self) -> None:
        block = CONV_HOOK.replace("-Conv-4x3x3x3", "-Upsample")
        with self.assertRaises(HookParseError) as ctx:
            self.parser.parse_hook(block, self.scale_map)
        self.assertEqual(ctx.exception.hook_name, "Anime4K-v4.0-Upscale-CNN-x2-(S)-Upsample")

    def test_non_main_hook_rejected(self) -> None:
        block = CONV_HOOK.replace("//!HOOK MAIN", "//!HOOK PREKERNEL")
        with self.assertRaises(HookParseError):
            self.parser.parse_hook(block, self.scale_map)

    def test_components_other_than_four_rejected(self) -> None:
        block = CONV_HOOK.replace("//!COMPONENTS 4", "//!COMPONENTS 2")
        with self.assertRaises(HookParseError):
            self.parser.parse_hook(block, self.scale_map)


class TestParse(unittest.TestCase):
    """Tests for whole-blob parsing."""

    def test_parses_in_order_with_shared_map(self) -> None:
        hooks, scale_map = HookParser().parse(CONV_HOOK + DEPTH_TO_SPACE_HOOK)
        self.assertEqual([h.index for h in hooks], [0, 1])
        self.assertEqual([h.kind for h in hooks], [StageKind.CONV, StageKind.DEPTH_TO_SPACE])
        self.assertEqual(scale_map["dest"], 2)

    def test_fresh_map_per_call(self) -> None:
        parser = HookParser()
        parser.parse(CONV_HOOK)
        _, scale_map = parser.parse(CONV_HOOK)
        self.assertEqual(set(scale_map), {"MAIN", "HOOKED", "source", "conv2d_tf"})


if __name__ == "__main__":
    unittest.main()
