"""
Canonical animal record schema for the analysis pipeline.

This module defines the in-memory representation of one animal's tumor
measurement series. All inputs are converted to this schema before outlier
detection, growth fitting or homogeneity scoring.

Design rationale:
- Minimal fields (identifier, group, time points, measurements)
- Missing or invalid numbers are stored as NaN and treated as absent
- camelCase aliases keep the browser-era wire shape available
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base model accepting and emitting camelCase keys.

    ``model_dump(by_alias=True)`` produces ``timePoints``-style keys while
    Python code keeps snake_case attribute names.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        validate_by_name=True,
        validate_by_alias=True,
    )


class AnimalRecord(CamelModel):
    """
    One animal's longitudinal tumor measurements.
    
    Attributes:
        id: Identifier, unique within a dataset
        group: Experimental group label
        time_points: Ordered days of measurement
        measurements: Measurement per time point (NaN when absent)
    
    Notes:
        - len(time_points) == len(measurements) is validated
        - Records are never mutated by the analysis; annotated copies are produced
    """

    id: str = Field(..., min_length=1, description="Animal identifier")
    group: str = Field(..., description="Experimental group label")
    time_points: List[float] = Field(default_factory=list, description="Days of measurement")
    measurements: List[float] = Field(default_factory=list, description="Measured tumor values")

    @model_validator(mode="after")
    def _check_lengths(self) -> "AnimalRecord":
        if len(self.time_points) != len(self.measurements):
            raise ValueError(
                f"animal {self.id!r}: {len(self.time_points)} time points "
                f"but {len(self.measurements)} measurements"
            )
        return self

    @property
    def point_count(self) -> int:
        return len(self.measurements)
