"""Configuration objects and helpers for VibeView.

This package knows how to load YAML descriptors that capture where payloads
live (a local dataset directory or an HTTP base URL) and how they are chunked,
downsampled and analysed. The resulting typed dataclass (see :mod:`runtime`)
is imported everywhere else to configure the ingestor, the pipeline and the
command-line tools consistently.
"""

from .runtime import VibeViewConfig, config_from_mapping, default_dataset_root, load_config

__all__ = ["VibeViewConfig", "config_from_mapping", "default_dataset_root", "load_config"]
