from .paths import TRACKED_SUFFIX, derive_output_paths

__all__ = ["TRACKED_SUFFIX", "derive_output_paths"]
