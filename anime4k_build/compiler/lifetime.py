"""Lifetime analysis: when each logical texture is live.

A texture is live from the pass that writes it to the last pass that reads
it. Two textures whose live ranges don't overlap can share GPU memory,
which is what the allocator exploits.
"""
from __future__ import annotations

from dataclasses import dataclass

from anime4k_build.config.manifest import SOURCE_TEXTURE, PassSpec
from anime4k_build.config.scale import ScaleFactorPair


@dataclass(frozen=True, slots=True)
class TextureLifetime:
    """Inclusive pass range `[created_at, last_used_at]` of a logical texture."""

    logical_id: str
    components: int
    scale_factor: ScaleFactorPair
    created_at: int
    last_used_at: int


class LifetimeAnalyzer:
    """Derives TextureLifetime records from an ordered pass list."""

    def analyze(self, passes: list[PassSpec]) -> list[TextureLifetime]:
        """Lifetimes of every produced texture, sorted by creation pass.

        SOURCE is never produced and always live, so it has no entry.
        """
        lifetimes: list[TextureLifetime] = []
        for pass_idx, spec in enumerate(passes):
            for output in spec.outputs:
                if output.id == SOURCE_TEXTURE:
                    continue
                lifetimes.append(
                    TextureLifetime(
                        logical_id=output.id,
                        components=output.components,
                        scale_factor=output.scale,
                        created_at=pass_idx,
                        last_used_at=self.last_use(passes, output.id, after=pass_idx),
                    )
                )

        # The allocator relies on creation order; sorted() is stable.
        return sorted(lifetimes, key=lambda t: t.created_at)

    def last_use(self, passes: list[PassSpec], texture: str, *, after: int) -> int:
        """Highest pass index after `after` reading `texture`, else `after`."""
        last = after
        for idx in range(after + 1, len(passes)):
            if any(binding.id == texture for binding in passes[idx].inputs):
                last = idx
        return last
