"""Assembly of validated APY snapshots from pluggable sources."""

from __future__ import annotations

from .assembler import APYAssembler
from .assembly import apy_in_bounds, assemble_apy_data, draw_apy, is_valid_number

__all__ = [
    "APYAssembler",
    "apy_in_bounds",
    "assemble_apy_data",
    "draw_apy",
    "is_valid_number",
]
