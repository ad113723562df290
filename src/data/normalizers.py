"""
Animal record normalization: coerce loosely-shaped inputs into AnimalRecord.

Inputs arrive already parsed (e.g. from a UI or a notebook) but may be
incomplete. Normalization repairs what can be repaired deterministically and
rejects only caller contract violations.

Design:
- Accepts AnimalRecord instances or mappings with snake_case or camelCase keys
- Missing identifier -> positional id, missing group -> "Ungrouped"
- Missing or non-numeric values -> NaN (treated as absent downstream)
- Absent time points or measurements -> NaN padding to the other sequence
- Mismatched lengths of two present sequences -> DataValidationError
"""

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any, List, Optional

from pydantic import ValidationError

from src.core.exceptions import DataValidationError
from src.data.schema import AnimalRecord

logger = logging.getLogger(__name__)

UNGROUPED = "Ungrouped"


def coerce_number(value: Any) -> float:
    """
    Convert a raw value to float, mapping anything unusable to NaN.
    
    Args:
        value: Raw numeric-like value (int, float, numeric string, None)
    
    Returns:
        float value, or NaN when the value is missing, boolean or non-numeric
    """
    if value is None or isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError:
        return math.nan


def _coerce_sequence(raw: Any) -> List[float]:
    if raw is None:
        return []
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Iterable):
        return []
    return [coerce_number(v) for v in raw]


def _first_present(raw: Mapping, *keys: str) -> Optional[Any]:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def normalize_animal(raw: Any, index: int = 0) -> AnimalRecord:
    """
    Normalize one raw animal into an AnimalRecord.
    
    Args:
        raw: AnimalRecord or mapping with id/group/timePoints/measurements keys
        index: Position in the input list, used to name unnamed animals
    
    Returns:
        Validated AnimalRecord
    
    Raises:
        DataValidationError: If raw is not a mapping or sequence lengths differ
    """
    if isinstance(raw, AnimalRecord):
        return raw
    if not isinstance(raw, Mapping):
        raise DataValidationError(
            f"animal at position {index} must be a mapping, got {type(raw).__name__}"
        )

    animal_id = _first_present(raw, "id", "animal_id", "animalId")
    if animal_id is None or str(animal_id).strip() == "":
        animal_id = f"animal_{index + 1}"
        logger.warning(f"Animal at position {index} has no id; using {animal_id}")

    group = _first_present(raw, "group")
    if group is None:
        group = UNGROUPED

    time_points = _coerce_sequence(_first_present(raw, "time_points", "timePoints"))
    measurements = _coerce_sequence(_first_present(raw, "measurements"))

    # an absent sequence is padded with missing values; two present sequences must agree
    if _first_present(raw, "time_points", "timePoints") is None and measurements:
        logger.warning(f"Animal {animal_id} has no time points; treating them as missing")
        time_points = [math.nan] * len(measurements)
    elif _first_present(raw, "measurements") is None and time_points:
        logger.warning(f"Animal {animal_id} has no measurements; treating them as missing")
        measurements = [math.nan] * len(time_points)

    try:
        return AnimalRecord(
            id=str(animal_id).strip(),
            group=str(group),
            time_points=time_points,
            measurements=measurements,
        )
    except ValidationError as e:
        raise DataValidationError(f"Invalid animal record at position {index}: {e}") from e


def normalize_animals(raw_animals: Iterable[Any]) -> tuple[list[AnimalRecord], int]:
    """
    Normalize multiple raw animals, skipping non-mapping entries.
    
    Args:
        raw_animals: Iterable of raw animals
    
    Returns:
        Tuple of (records, skipped_count)
    
    Notes:
        - Entries that are not mappings are skipped (logged as warnings)
        - Length mismatches still raise: they are caller contract violations
    """
    records = []
    skipped = 0

    for index, raw in enumerate(raw_animals or []):
        if raw is None or not isinstance(raw, (Mapping, AnimalRecord)):
            logger.warning(f"Skipped non-record entry at position {index}")
            skipped += 1
            continue
        records.append(normalize_animal(raw, index))

    return records, skipped
