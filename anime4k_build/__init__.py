"""anime4k-build: compiles Anime4K shader pipelines.

Pass-list manifests and legacy mpv hook files go in; a CompiledPipeline
comes out, with logical textures packed into as few physical textures as
their lifetimes allow and every shader embedded.
"""
