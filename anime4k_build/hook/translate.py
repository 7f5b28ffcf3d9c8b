"""Hook translator: parsed GLSL hooks into WGSL compute stages.

Anime4K convolution hooks are written in a very regular subset of GLSL: a
couple of texture-access macros, a `hook()` entry point, and a run of
`result += mat4(...) * macro(x, y);` accumulations followed by a bias and
a return. The translator recognizes exactly that subset line by line and
emits an equivalent WGSL compute shader:

- macros become helper functions (`textureLoad` for same-scale access,
  `textureSampleLevel` for access across scales, optional ReLU)
- `hook()` becomes a bounds-checked `main`, an unchecked `main_unchecked`
  and a shared `process(pos)`
- same-scale offset reads are clamped on the sides that can leave the
  image, which reproduces edge-replicating sampling without a sampler
- residual returns add the source image, loaded or sampled depending on
  the stage scale

Any line outside the subset is an error; nothing is passed through or
dropped silently. Depth-to-space stages are not translated at all: their
algorithm is fixed and comes from pre-authored helper shaders.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from anime4k_build.errors import TranslationError, UnknownTextureError
from anime4k_build.hook.parse import ParsedHook, ScaleFactorMap, StageKind

logger = logging.getLogger(__name__)

# #define go_0(x_off, y_off) (max(-(conv2d_tf_texOff(vec2(x_off, y_off) * 0.5)), 0.0))
_OFFSET_MACRO_RE = re.compile(
    r"^#define (?P<name>\w+)\(x_off, y_off\) "
    r"\((?:max\((?P<sign>-?)\()?(?P<texture>\w+)_texOff\(vec2\(x_off, y_off\)"
    r"(?: \* (?P<fraction>0\.\d+))?\)(?:\), 0\.0\))?\)$"
)
# #define g_0 (max(-(conv2d_tf_tex(conv2d_tf_pos)), 0.0))
_RELU_MACRO_RE = re.compile(
    r"^#define (?P<name>\w+) \(max\((?P<sign>-?)\((?P<texture>\w+)_tex\(\w+\)\), 0\.0\)\)$"
)
_ENTRYPOINT_BEGIN_RE = re.compile(r"^vec4 hook\(\) \{$")
_ENTRYPOINT_END_RE = re.compile(r"^\}$")
# vec4 result = mat4(...) * go_0(-1.0, 0.0);
_ACCUMULATE_RE = re.compile(
    r"^(?P<decl>vec4 )?result \+?= mat4\((?P<weights>[^)]+)\) \* (?P<func>\w+)"
    r"(?:\((?P<x_offset>1|0|-1)\.0, (?P<y_offset>1|0|-1)\.0\))?;$"
)
_BIAS_RE = re.compile(r"^result \+= vec4\((?P<weights>[^)]+)\);$")
_RETURN_RE = re.compile(r"^return result;$")
_RETURN_RESIDUAL_RE = re.compile(
    r"^return result(?P<factor>(?: \* 0\.\d+)?) \+ MAIN_tex\(MAIN_pos\);$"
)


@dataclass(frozen=True, slots=True)
class StageShader:
    """A hook turned into a compute stage with concrete binding slots.

    inputs: (slot, logical id) with `source` renamed to SOURCE
    output: (slot, logical id) with `dest` renamed to RESULT
    sampler: slot of the linear sampler, if the stage samples across scales
    code: generated WGSL (convolution stages only)
    channel_count: number of inputs (depth-to-space stages only)
    """

    hook: ParsedHook
    name: str
    kind: StageKind
    inputs: tuple[tuple[int, str], ...]
    output: tuple[int, str]
    sampler: int | None
    scale_factor: int
    code: str | None = None
    channel_count: int | None = None

    def helper_filename(self) -> str:
        """Name of the pre-authored shader a depth-to-space stage runs.

        Helpers are keyed by feature input count (the source image is not a
        feature input) and upscale factor, e.g. `depth_to_space_in1x2.wgsl`.
        """
        if self.channel_count is None:
            raise ValueError(f"{self.name}: only depth-to-space stages use helper shaders")
        return f"depth_to_space_in{self.channel_count - 1}x{self.scale_factor}.wgsl"


class HookTranslator:
    """Turns ParsedHook records into StageShader records."""

    def __init__(self, workgroup_size: tuple[int, int] = (8, 8)) -> None:
        self.workgroup_size = workgroup_size

    def translate(self, hook: ParsedHook, scale_map: ScaleFactorMap) -> StageShader:
        """Translate one hook. `scale_map` must already hold every texture it reads."""
        inputs = tuple(
            (slot, "SOURCE" if texture == "source" else texture)
            for slot, texture in enumerate(hook.inputs)
        )
        output_id = "RESULT" if hook.output == "dest" else hook.output
        output = (len(inputs), output_id)
        name = "result" if hook.output == "dest" else hook.output

        match hook.kind:
            case StageKind.CONV:
                code = self.convert_conv_hook(hook, scale_map)
                sampler = len(inputs) + 1 if hook.needs_sampler else None
                return StageShader(
                    hook=hook,
                    name=name,
                    kind=hook.kind,
                    inputs=inputs,
                    output=output,
                    sampler=sampler,
                    scale_factor=hook.scale_factor,
                    code=code,
                )
            case StageKind.DEPTH_TO_SPACE:
                sampler = len(inputs) + 1 if hook.scale_factor > 1 else None
                return StageShader(
                    hook=hook,
                    name=name,
                    kind=hook.kind,
                    inputs=inputs,
                    output=output,
                    sampler=sampler,
                    scale_factor=hook.scale_factor,
                    channel_count=len(hook.inputs),
                )
            case _:
                raise TranslationError(f"Unsupported stage kind {hook.kind!r}", hook_name=hook.name)

    def convert_conv_hook(self, hook: ParsedHook, scale_map: ScaleFactorMap) -> str:
        """Translate a convolution hook body to a complete WGSL module."""
        emitter = _ConvEmitter(hook, scale_map, self.workgroup_size)
        emitter.emit_header()
        for raw_line in hook.code.splitlines():
            emitter.translate_line(raw_line.strip())
        logger.debug("translated %r into %d WGSL lines", hook.name, len(emitter.lines))
        return "".join(emitter.lines)


class _ConvEmitter:
    """Per-hook translation state: output lines and known macro scales."""

    def __init__(
        self,
        hook: ParsedHook,
        scale_map: ScaleFactorMap,
        workgroup_size: tuple[int, int],
    ) -> None:
        self.hook = hook
        self.scale_map = scale_map
        self.workgroup_size = workgroup_size
        self.out = f"{hook.output}_tex"
        self.lines: list[str] = []
        self.func_scales: dict[str, int] = {}
        self.prologue_emitted = False

    def emit(self, text: str = "") -> None:
        self.lines.append(f"{text}\n")

    def fail(self, message: str, line: str | None = None) -> TranslationError:
        return TranslationError(message, hook_name=self.hook.name, line=line)

    def emit_header(self) -> None:
        hook = self.hook
        self.emit(f"// Layer: {hook.name}")
        self.emit(f"// Inputs: {', '.join(hook.inputs)}")
        self.emit(f"// Output: {hook.output}")
        self.emit(f"// Scale Factor: x{hook.scale_factor} from source")
        self.emit()
        for slot, texture in enumerate(hook.inputs):
            self.emit(f"@group(0) @binding({slot}) var {texture}_tex: texture_2d<f32>;")
        self.emit(
            f"@group(0) @binding({len(hook.inputs)}) var {self.out}: "
            "texture_storage_2d<rgba32float, write>;"
        )
        if hook.needs_sampler:
            self.emit(f"@group(0) @binding({len(hook.inputs) + 1}) var input_sampler: sampler;")
        self.emit()

    def translate_line(self, line: str) -> None:
        if (m := _OFFSET_MACRO_RE.match(line)) is not None:
            self.offset_macro(m, line)
        elif (m := _RELU_MACRO_RE.match(line)) is not None:
            self.relu_macro(m, line)
        elif _ENTRYPOINT_BEGIN_RE.match(line):
            self.entrypoint()
        elif _ENTRYPOINT_END_RE.match(line):
            self.emit("}")
        elif (m := _ACCUMULATE_RE.match(line)) is not None:
            self.accumulate(m, line)
        elif (m := _BIAS_RE.match(line)) is not None:
            self.emit(f"    result += vec4f({m.group('weights')});")
        elif _RETURN_RE.match(line):
            self.emit(f"    textureStore({self.out}, pos, result);")
        elif (m := _RETURN_RESIDUAL_RE.match(line)) is not None:
            self.residual_return(m.group("factor"))
        elif line.startswith("//") or not line:
            return
        else:
            raise self.fail("Unexpected line", line)

    def texture_scale(self, macro_texture: str) -> tuple[str, int]:
        texture = "source" if macro_texture == "MAIN" else macro_texture
        if texture not in self.scale_map:
            raise UnknownTextureError(texture, context=f"{self.hook.name} macro")
        return texture, self.scale_map[texture]

    def offset_macro(self, m: re.Match[str], line: str) -> None:
        func = m.group("name")
        texture, scale = self.texture_scale(m.group("texture"))
        fraction = m.group("fraction")
        sign = m.group("sign")

        if fraction is not None:
            if scale == self.hook.scale_factor:
                raise self.fail(
                    "Fraction should only be used for textures with different scale factors",
                    line,
                )
            self.emit(f"fn {func}(uv_pos: vec2f, offset: vec2i) -> vec4f {{")
            self.emit(
                f"    let coords = uv_pos + vec2f(offset) * {fraction} "
                f"/ vec2f(textureDimensions({texture}_tex));"
            )
            self.emit(
                f"    let value = textureSampleLevel({texture}_tex, input_sampler, coords, 0.0);"
            )
        else:
            if scale != self.hook.scale_factor:
                raise self.fail(
                    "Fraction should be used for textures with different scale factors", line
                )
            self.emit(f"fn {func}(pos: vec2i) -> vec4f {{")
            self.emit(f"    let value = textureLoad({texture}_tex, pos, 0);")

        if sign is None:
            self.emit("    return value;")
        else:
            self.emit(f"    return max({sign}value, vec4f());")
        self.emit("}")
        self.emit()
        self.func_scales[func] = scale

    def relu_macro(self, m: re.Match[str], line: str) -> None:
        func = m.group("name")
        texture, scale = self.texture_scale(m.group("texture"))
        if scale != self.hook.scale_factor:
            raise self.fail(
                "Non-offset macros should only be used for textures with the same scale factor",
                line,
            )
        self.emit(f"fn {func}(pos: vec2i) -> vec4f {{")
        self.emit(f"    let value = textureLoad({texture}_tex, pos, 0);")
        self.emit(f"    return max({m.group('sign')}value, vec4f());")
        self.emit("}")
        self.emit()
        self.func_scales[func] = scale

    def entrypoint(self) -> None:
        x, y = self.workgroup_size
        self.emit(f"@compute @workgroup_size({x}, {y})")
        self.emit("fn main(@builtin(global_invocation_id) pixel: vec3u) {")
        self.emit(f"    let out_dim: vec2u = textureDimensions({self.out});")
        self.emit("    if (pixel.x < out_dim.x && pixel.y < out_dim.y) {")
        self.emit("        process(vec2i(pixel.xy));")
        self.emit("    }")
        self.emit("}")
        self.emit()
        self.emit(f"@compute @workgroup_size({x}, {y})")
        self.emit("fn main_unchecked(@builtin(global_invocation_id) pixel: vec3u) {")
        self.emit("    process(vec2i(pixel.xy));")
        self.emit("}")
        self.emit()
        self.emit("fn process(pos: vec2i) {")

    def prologue(self) -> None:
        """Coordinates shared by every accumulation, emitted once per stage."""
        if self.prologue_emitted:
            return
        if self.hook.needs_bound:
            self.emit(f"    let bound = vec2i(textureDimensions({self.out})) - 1;")
        if self.hook.needs_sampler:
            self.emit(
                f"    let uv_pos = (vec2f(pos) + 0.5) / vec2f(textureDimensions({self.out}));"
            )
        self.prologue_emitted = True

    def accumulate(self, m: re.Match[str], line: str) -> None:
        weights = m.group("weights")
        func = m.group("func")
        x_offset = m.group("x_offset")
        y_offset = m.group("y_offset")

        if func not in self.func_scales:
            raise self.fail(f"Unknown function '{func}'", line)
        func_scale = self.func_scales[func]

        self.prologue()
        if m.group("decl") is not None:
            self.emit("    var result = vec4f();")

        if x_offset is None or y_offset is None:
            if func_scale != self.hook.scale_factor:
                raise self.fail(
                    "Non-offset macros should only be used for textures with the same scale factor",
                    line,
                )
            self.emit(f"    result += mat4x4f({weights}) * {func}(pos);")
        elif func_scale != self.hook.scale_factor:
            self.emit(
                f"    result += mat4x4f({weights}) * {func}(uv_pos, vec2i({x_offset}, {y_offset}));"
            )
        else:
            coords = clamped_offset(x_offset, y_offset)
            self.emit(f"    result += mat4x4f({weights}) * {func}({coords});")

    def residual_return(self, factor: str) -> None:
        if self.hook.scale_factor == 1:
            residual = "textureLoad(source_tex, pos, 0)"
        else:
            residual = "textureSampleLevel(source_tex, input_sampler, uv_pos, 0.0)"
        self.emit(f"    textureStore({self.out}, pos, result{factor} + {residual});")


def clamped_offset(x_offset: str, y_offset: str) -> str:
    """WGSL for `pos + offset`, clamped only where the offset can leave the image."""
    needs_neg = x_offset.startswith("-") or y_offset.startswith("-")
    needs_pos = (not x_offset.startswith("-") and x_offset != "0") or (
        not y_offset.startswith("-") and y_offset != "0"
    )
    shifted = f"pos + vec2i({x_offset}, {y_offset})"
    if needs_neg and needs_pos:
        return f"clamp({shifted}, vec2i(0), bound)"
    if needs_neg:
        return f"max({shifted}, vec2i(0))"
    if needs_pos:
        return f"min({shifted}, bound)"
    return "pos"
