"""Fragment loading and merging."""

from .loader import decode_blob, decode_fragment, load_fragments
from .merge import merge_fragments

__all__ = [
    "decode_blob",
    "decode_fragment",
    "load_fragments",
    "merge_fragments",
]
