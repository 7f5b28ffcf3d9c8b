"""Hook parser: mpv-style `//!` shader hooks into structured stages.

The legacy Anime4K shaders ship as one GLSL blob holding many hooks. Each
hook starts at a `//!DESC` line and declares, through directive comments,
what it reads (`BIND`), what it writes (`SAVE`) and how large the output
is (`WIDTH`/`HEIGHT`, relative to a texture defined earlier). Everything
else is the GLSL body.

Scale factors are resolved against a running map of texture name to
integer scale. The map is an explicit symbol table: callers create it with
`new_scale_factor_map()` and pass it through every `parse_hook()` call in
source order, which registers each hook's output once it parsed cleanly.
"""
from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass

from anime4k_build.errors import HookParseError, UnknownTextureError

logger = logging.getLogger(__name__)

ScaleFactorMap = dict[str, int]

DIRECTIVE_PREFIX = "//!"
_SCALE_FACTOR_RE = re.compile(r"^//!(?:WIDTH|HEIGHT) (\w+)\.[wh](?: (\d+) \*)?$")


class StageKind(str, enum.Enum):
    """What a hook computes.

    CONV: a convolution layer (weights, bias, ReLU, optional residual)
    DEPTH_TO_SPACE: channel-to-pixel rearrangement that upscales
    """

    CONV = "conv"
    DEPTH_TO_SPACE = "depth_to_space"

    @classmethod
    def from_description(cls, description: str) -> "StageKind | None":
        if "-Conv-" in description:
            return cls.CONV
        if "-Depth-to-Space" in description:
            return cls.DEPTH_TO_SPACE
        return None


@dataclass(frozen=True, slots=True)
class ParsedHook:
    """One hook with its directives resolved.

    Input names use the normalized spelling: `MAIN` reads become `source`
    and a `MAIN` save becomes `dest`.
    """

    index: int
    name: str
    kind: StageKind
    scale_factor: int
    inputs: tuple[str, ...]
    output: str
    needs_bound: bool
    needs_sampler: bool
    code: str


def new_scale_factor_map() -> ScaleFactorMap:
    """Seed the symbol table with the textures every hook can see."""
    return {"MAIN": 1, "HOOKED": 1, "source": 1}


def split_hooks(source: str) -> list[str]:
    """Split a hook blob into per-hook blocks, one per `//!DESC` line.

    Text before the first DESC line belongs to no hook and is dropped.
    """
    hooks: list[str] = []
    current: list[str] = []

    for line in source.splitlines():
        if line.startswith("//!DESC "):
            if current:
                hooks.append("".join(current))
            current = [f"{line}\n"]
            continue
        if current:
            current.append(f"{line}\n")

    if current:
        hooks.append("".join(current))
    return hooks


class HookParser:
    """Extracts ParsedHook records from hook-format source."""

    def parse(self, source: str) -> tuple[list[ParsedHook], ScaleFactorMap]:
        """Parse a whole blob with a fresh scale map.

        Returns the hooks in source order and the final map.
        """
        scale_map = new_scale_factor_map()
        hooks = [
            self.parse_hook(block, scale_map, index=i)
            for i, block in enumerate(split_hooks(source))
        ]
        return hooks, scale_map

    def parse_hook(self, block: str, scale_map: ScaleFactorMap, *, index: int = 0) -> ParsedHook:
        """Parse one hook block and register its output in `scale_map`."""
        name = ""
        scale_factor = 0
        inputs: list[str] = []
        output = ""
        code: list[str] = []

        for line in block.splitlines():
            if line.startswith("//!DESC "):
                name = line.removeprefix("//!DESC ").strip()
            elif line.startswith("//!WIDTH ") or line.startswith("//!HEIGHT "):
                current = self._resolve_scale(line, scale_map, index=index, name=name)
                if scale_factor == 0:
                    scale_factor = current
                elif scale_factor != current:
                    raise HookParseError(
                        f"Inconsistent scale factors: {scale_factor} vs {current}",
                        hook_index=index,
                        hook_name=name,
                        line=line,
                    )
            elif line.startswith("//!BIND "):
                content = line.removeprefix("//!BIND ").strip()
                inputs.append("source" if content == "MAIN" else content)
            elif line.startswith("//!SAVE "):
                content = line.removeprefix("//!SAVE ").strip()
                output = "dest" if content == "MAIN" else content
            elif line.startswith("//!HOOK "):
                content = line.removeprefix("//!HOOK ").strip()
                if content != "MAIN":
                    raise HookParseError(
                        f"Unsupported hook type '{content}'. Fix: only MAIN hooks are supported.",
                        hook_index=index,
                        hook_name=name,
                    )
            elif line.startswith("//!COMPONENTS "):
                content = line.removeprefix("//!COMPONENTS ").strip()
                if content != "4":
                    raise HookParseError(
                        f"Unsupported number of components '{content}'. "
                        "Fix: hook textures must have 4 components.",
                        hook_index=index,
                        hook_name=name,
                    )
            elif line.startswith("//!WHEN "):
                # Conditional hooks always run.
                continue
            else:
                code.append(f"{line}\n")

        if not name:
            raise HookParseError("No name specified", hook_index=index)
        kind = StageKind.from_description(name)
        if kind is None:
            raise HookParseError(
                "Unknown hook type. Fix: the description must contain "
                "'-Conv-' or '-Depth-to-Space'.",
                hook_index=index,
                hook_name=name,
            )
        if not inputs:
            raise HookParseError("No inputs specified", hook_index=index, hook_name=name)
        if not output:
            raise HookParseError("No output specified", hook_index=index, hook_name=name)
        if scale_factor == 0:
            raise HookParseError(
                "No scale factor specified. Fix: add //!WIDTH and //!HEIGHT directives.",
                hook_index=index,
                hook_name=name,
            )

        needs_sampler = False
        needs_bound = False
        for texture in inputs:
            if texture not in scale_map:
                raise UnknownTextureError(texture, context=f"hook {index} '{name}' input")
            if scale_map[texture] == scale_factor:
                needs_bound = True
            else:
                needs_sampler = True

        scale_map[output] = scale_factor
        logger.debug(
            "hook %d %r: kind=%s scale=%d inputs=%s output=%s",
            index,
            name,
            kind.value,
            scale_factor,
            inputs,
            output,
        )

        return ParsedHook(
            index=index,
            name=name,
            kind=kind,
            scale_factor=scale_factor,
            inputs=tuple(inputs),
            output=output,
            needs_bound=needs_bound,
            needs_sampler=needs_sampler,
            code="".join(code),
        )

    def _resolve_scale(
        self, line: str, scale_map: ScaleFactorMap, *, index: int, name: str
    ) -> int:
        """Resolve `//!WIDTH tex.w [N *]` to an absolute integer scale."""
        match = _SCALE_FACTOR_RE.match(line)
        if match is None:
            raise HookParseError(
                "Invalid scale factor line. Fix: use '//!WIDTH <texture>.w [<n> *]'.",
                hook_index=index,
                hook_name=name,
                line=line,
            )
        base, ratio = match.group(1), match.group(2)
        if base not in scale_map:
            raise UnknownTextureError(base, context=f"hook {index} '{name}' scale directive")
        return scale_map[base] * (int(ratio) if ratio is not None else 1)
