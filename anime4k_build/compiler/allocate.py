"""Physical texture allocation: packing logical textures into GPU slots.

A pipeline may define dozens of intermediate textures, but only a few are
live at once. The allocator walks lifetimes in creation order and hands
each texture the first slot whose previous occupant is dead and has the
same shape (components and scale), opening a new slot otherwise.

Greedy first-fit, not optimal interval coloring: slot ids are part of
compiled pipelines and must not be renumbered.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from anime4k_build.compiler.lifetime import TextureLifetime
from anime4k_build.config.manifest import SOURCE_TEXTURE
from anime4k_build.config.scale import UNITY_PAIR, ScaleFactorPair

logger = logging.getLogger(__name__)

# Reserved id of the pipeline input; allocated slots count up from 0.
SOURCE_TEXTURE_ID = 2**32 - 1


@dataclass(frozen=True, slots=True)
class PhysicalTexture:
    """A GPU texture that one or more logical textures occupy in turn."""

    id: int
    components: int
    scale_factor: ScaleFactorPair
    is_source: bool

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "components": self.components,
            "scale_factor": [s.to_dict() for s in self.scale_factor],
            "is_source": self.is_source,
        }


SOURCE_PHYSICAL_TEXTURE = PhysicalTexture(
    id=SOURCE_TEXTURE_ID,
    components=4,
    scale_factor=UNITY_PAIR,
    is_source=True,
)


@dataclass(frozen=True, slots=True)
class Allocation:
    """Allocator result.

    textures: SOURCE first, then one entry per slot in opening order
    assignments: logical id -> physical id, SOURCE included
    """

    textures: tuple[PhysicalTexture, ...]
    assignments: dict[str, int]

    def physical_id(self, logical_id: str) -> int | None:
        return self.assignments.get(logical_id)


class PhysicalAllocator:
    """Greedy first-fit slot allocator with immediate reuse."""

    def allocate(self, lifetimes: list[TextureLifetime]) -> Allocation:
        """Assign a physical id to every lifetime, in the order given."""
        textures: list[PhysicalTexture] = [SOURCE_PHYSICAL_TEXTURE]
        assignments: dict[str, int] = {SOURCE_TEXTURE: SOURCE_TEXTURE_ID}
        slots: list[TextureLifetime] = []

        for lifetime in lifetimes:
            physical_id = self.find_reusable_slot(slots, lifetime)
            if physical_id is None:
                physical_id = len(slots)
                slots.append(lifetime)
                textures.append(
                    PhysicalTexture(
                        id=physical_id,
                        components=lifetime.components,
                        scale_factor=lifetime.scale_factor,
                        is_source=False,
                    )
                )
                logger.debug("%s -> new slot %d", lifetime.logical_id, physical_id)
            else:
                slots[physical_id] = lifetime
                logger.debug("%s -> reused slot %d", lifetime.logical_id, physical_id)
            assignments[lifetime.logical_id] = physical_id

        return Allocation(textures=tuple(textures), assignments=assignments)

    def find_reusable_slot(
        self, slots: list[TextureLifetime], lifetime: TextureLifetime
    ) -> int | None:
        """First slot whose occupant is dead and shaped alike."""
        for physical_id, occupant in enumerate(slots):
            if self.can_reuse(occupant, lifetime):
                return physical_id
        return None

    def can_reuse(self, occupant: TextureLifetime, lifetime: TextureLifetime) -> bool:
        # Scale factors compare unreduced: 2/1 and 4/2 never share a slot.
        return (
            occupant.last_used_at < lifetime.created_at
            and occupant.components == lifetime.components
            and occupant.scale_factor == lifetime.scale_factor
        )
