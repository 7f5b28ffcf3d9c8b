"""Validation pass: check the structure of a pass list.

Before allocating anything we make sure the manifest describes a pipeline
that can run at all:
- the pipeline has an id, a name and at least one pass
- every pass reads and writes something
- binding slots don't collide within a pass
- RESULT is produced by the last pass only
- every texture is written exactly once (SOURCE never)
- every input was written by an earlier pass, or is SOURCE

Each rule raises its own error type so callers and tests can tell them
apart without matching on messages.
"""
from __future__ import annotations

from anime4k_build.config.manifest import (
    RESULT_TEXTURE,
    SOURCE_TEXTURE,
    PassSpec,
    PipelineManifest,
)
from anime4k_build.errors import (
    DuplicateBindingError,
    EmptyIdError,
    EmptyNameError,
    InputTextureNotFoundError,
    NoPassesError,
    PassMissingInputsError,
    PassMissingOutputsError,
    ResultNotInLastPassError,
    TextureOverwrittenError,
)


class Validator:
    """Checks referential and structural integrity of a manifest.

    Rules run in a fixed order and the first violation is raised.
    """

    def validate_manifest(self, manifest: PipelineManifest) -> None:
        if not manifest.id:
            raise EmptyIdError()
        if not manifest.name:
            raise EmptyNameError()
        self.validate_passes(manifest.passes)

    def validate_passes(self, passes: list[PassSpec]) -> None:
        if not passes:
            raise NoPassesError()
        self.require_inputs_and_outputs(passes)
        self.require_unique_bindings(passes)
        self.require_result_last(passes)
        self.require_single_writer(passes)
        self.require_inputs_defined(passes)

    def require_inputs_and_outputs(self, passes: list[PassSpec]) -> None:
        for i, spec in enumerate(passes):
            if not spec.inputs:
                raise PassMissingInputsError(i)
            if not spec.outputs:
                raise PassMissingOutputsError(i)

    def require_unique_bindings(self, passes: list[PassSpec]) -> None:
        for i, spec in enumerate(passes):
            used: set[int] = set()
            for binding in spec.bindings():
                if binding in used:
                    raise DuplicateBindingError(i, binding)
                used.add(binding)

    def require_result_last(self, passes: list[PassSpec]) -> None:
        last = len(passes) - 1
        for i, spec in enumerate(passes):
            if i != last and any(o.id == RESULT_TEXTURE for o in spec.outputs):
                raise ResultNotInLastPassError(i)

    def require_single_writer(self, passes: list[PassSpec]) -> None:
        created = {SOURCE_TEXTURE}
        for i, spec in enumerate(passes):
            for output in spec.outputs:
                if output.id in created:
                    raise TextureOverwrittenError(i, output.id)
                created.add(output.id)

    def require_inputs_defined(self, passes: list[PassSpec]) -> None:
        available = {SOURCE_TEXTURE}
        for i, spec in enumerate(passes):
            for binding in spec.inputs:
                if binding.id not in available:
                    raise InputTextureNotFoundError(i, binding.id)
            available.update(o.id for o in spec.outputs)
