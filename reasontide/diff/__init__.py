from .builder import DiffBuilder, DiffError, build_diff_args, summarize_diff, validate_ref

__all__ = [
    "DiffBuilder",
    "DiffError",
    "build_diff_args",
    "summarize_diff",
    "validate_ref"
]
