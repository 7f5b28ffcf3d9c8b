"""Rich, structured console output for anime4k-build.

Usage:
    from anime4k_build.console import logger

    logger.info("Compiling manifest...")
    logger.success("Pipeline written")
    logger.warning("Helpers directory not found")
    logger.error("Pass 3 is missing inputs")

    # Structured output
    logger.header("Compile", "deblur_dog")
    logger.pipeline_summary(pipeline)
    logger.key_value({"passes": 7, "physical textures": 3})
"""
from anime4k_build.console.logger import Logger, get_logger

# Module-level singleton for convenient import
logger = get_logger()

__all__ = ["Logger", "get_logger", "logger"]
