"""
Data module: canonical animal records and input normalization.

Converts loosely-shaped animal inputs into validated records suitable for
outlier detection, growth fitting and homogeneity scoring. Pipeline:

    Raw animals (mappings from a UI, notebook or upstream parser)
        ↓
    Normalization (src/data/normalizers.py) → AnimalRecord
        ↓
    Ready for analysis (src/anomaly, src/growth, src/homogeneity)
"""

from src.data.normalizers import (
    UNGROUPED,
    coerce_number,
    normalize_animal,
    normalize_animals,
)
from src.data.schema import AnimalRecord, CamelModel

__all__ = [
    # Schema
    "AnimalRecord",
    "CamelModel",
    
    # Normalization
    "normalize_animal",
    "normalize_animals",
    "coerce_number",
    "UNGROUPED",
]
