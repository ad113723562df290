"""
Application configuration for the tumor cohort quality-control core.

Provides environment-aware settings with conservative defaults. Detection
thresholds, homogeneity cut-offs and worker limits are configurable to avoid
hard-coded "magic numbers" in the analysis code.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnomalyConfig(BaseModel):
	"""
	Outlier detection defaults.

	Notes:
	- default_profile: sensitivity preset used when the caller passes none.
	- filtering_strictness: which severities turn a flag into an exclusion.
	- last_day_drop_ratio: final value below this fraction of the previous one is a drop.
	- min_points_for_intra_iqr: series shorter than this skip the intra-animal IQR scan.
	- min_values_per_day: a group day needs this many positive values for IQR bounds.
	- min_points_after_filtering: animals left with fewer points leave the point view.
	"""

	default_profile: str = Field("conservative", description="Named sensitivity profile")
	filtering_strictness: str = Field(
		"criticalAndHigh",
		description="Filtering strictness: 'critical', 'criticalAndHigh' or 'all'",
	)
	last_day_drop_ratio: float = Field(0.5, gt=0.0, lt=1.0)
	min_points_for_intra_iqr: int = Field(4, ge=2)
	min_values_per_day: int = Field(3, ge=2)
	min_points_after_filtering: int = Field(3, ge=1)


class GrowthConfig(BaseModel):
	"""
	Exponential growth fitting configuration.

	Notes:
	- min_valid_points: fewer positive finite points yield a degenerate model.
	- batch_size: animals per batch in batch fitting.
	- progress_interval: progress is reported every N animals within a batch.
	"""

	min_valid_points: int = Field(3, ge=2)
	batch_size: int = Field(50, ge=1)
	progress_interval: int = Field(10, ge=1)


class HomogeneityThresholds(BaseModel):
	"""
	Baseline coefficient-of-variation thresholds (percent).

	Rationale:
	- Higher CV is worse, so excellent <= good <= poor.
	- Small groups are penalized multiplicatively and cumulatively.
	"""

	excellent: float = Field(15.0, gt=0.0)
	good: float = Field(25.0, gt=0.0)
	poor: float = Field(30.0, gt=0.0)
	small_sample_n: int = Field(5, ge=1)
	very_small_sample_n: int = Field(3, ge=1)
	small_sample_factor: float = Field(0.8, gt=0.0, le=1.0)
	very_small_sample_factor: float = Field(0.6, gt=0.0, le=1.0)

	@model_validator(mode="after")
	def _check_ordering(self) -> "HomogeneityThresholds":
		if not self.excellent <= self.good <= self.poor:
			raise ValueError("thresholds must satisfy excellent <= good <= poor")
		return self


class WorkerConfig(BaseModel):
	"""
	Process pool settings for chunked scans and batch fits.

	Notes:
	- max_workers: 1 keeps everything in-process.
	- parallel_min_animals: smaller datasets are never sent to the pool.
	- timeout_seconds: per-chunk wait before the result is discarded.
	"""

	max_workers: int = Field(1, ge=1)
	parallel_min_animals: int = Field(10, ge=1)
	max_chunks: int = Field(4, ge=1)
	timeout_seconds: float = Field(30.0, gt=0.0)


class Config(BaseSettings):
	"""
	Global configuration with environment overrides.
	"""

	model_config = SettingsConfigDict(
		env_prefix="TUMORQC_",
		env_file=".env",
		env_nested_delimiter="__",
		extra="ignore",
	)

	log_level: str = Field("INFO", description="Default logging level")
	logs_dir: Path = Field(Path("logs"), description="Directory for log files")
	anomaly: AnomalyConfig = AnomalyConfig()
	growth: GrowthConfig = GrowthConfig()
	homogeneity: HomogeneityThresholds = HomogeneityThresholds()
	workers: WorkerConfig = WorkerConfig()

	def model_post_init(self, __context: object) -> None:
		self.logs_dir.mkdir(parents=True, exist_ok=True)


config = Config()
