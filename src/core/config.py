"""
Application configuration for the Stream Sentinel engine.

Provides environment-aware settings with conservative defaults. Every detection
threshold and buffer bound is configurable to avoid hard-coded "magic numbers".
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class BaselineConfig(BaseModel):
	"""
	Static reference values the detectors compare live traffic against.

	These are not learned from traffic; they are fixed for the lifetime of an engine.
	"""

	normal_requests_per_minute: float = Field(50, gt=0.0, allow_inf_nan=False, description="Normal network events per minute")
	normal_daily_transfer_mb: float = Field(20, gt=0.0, allow_inf_nan=False, description="Normal daily transfer volume in MB")


class WindowConfig(BaseModel):
	"""
	Bounds of the recent-event window.

	Notes:
	- max_count: hard cap on buffered events (oldest evicted first).
	- max_age_seconds: events older than this relative to the newest are evicted.
	- rate_interval_seconds: lookback used to approximate requests per minute.
	"""

	max_count: int = Field(10000, ge=1)
	max_age_seconds: float = Field(60.0, gt=0.0)
	rate_interval_seconds: float = Field(60.0, gt=0.0)


class DetectionConfig(BaseModel):
	"""
	Rule parameters for the three detectors.

	Confidences are fixed per rule; they are not probabilities learned from data.
	"""

	high_risk_geos: List[str] = Field(
		default_factory=lambda: ["Russia", "China", "North Korea", "Iran"]
	)
	medium_risk_geos: List[str] = Field(
		default_factory=lambda: ["Nigeria", "Romania", "Ukraine"]
	)
	business_hours_start: int = Field(6, ge=0, le=23)
	business_hours_end: int = Field(22, ge=0, le=23)

	new_location_confidence: float = Field(0.85, ge=0.0, le=1.0)
	off_hours_confidence: float = Field(0.72, ge=0.0, le=1.0)
	network_confidence: float = Field(0.91, ge=0.0, le=1.0)
	data_theft_confidence: float = Field(0.88, ge=0.0, le=1.0)

	network_threshold_multiplier: float = Field(10, gt=0.0)
	network_high_multiplier: int = Field(50, ge=1)
	transfer_threshold_multiplier: float = Field(100, gt=0.0)
	transfer_high_factor: float = Field(5, gt=0.0)

	@model_validator(mode="after")
	def _check_business_hours(self) -> "DetectionConfig":
		if self.business_hours_start >= self.business_hours_end:
			raise ConfigurationError(
				f"business_hours_start ({self.business_hours_start}) must be before "
				f"business_hours_end ({self.business_hours_end})"
			)
		return self


class BroadcastConfig(BaseModel):
	"""
	Per-subscriber delivery settings.

	buffer_size bounds undelivered items per subscriber; on overflow the oldest
	undelivered item is dropped.
	"""

	buffer_size: int = Field(1000, ge=1)


class SimulationConfig(BaseModel):
	"""Parameters of the canonical attack scenarios."""

	login_geo: str = "Russia"
	login_device: str = "Windows Desktop"
	burst_size: Optional[int] = Field(
		None,
		ge=1,
		description="Network events per burst; None means just enough to reach High severity",
	)
	exfiltration_size_mb: float = Field(2048, gt=0.0, allow_inf_nan=False)
	exfiltration_destination: str = "external_server_suspicious.com"


class StreamConfig(BaseModel):
	"""
	Stream engine configuration.
	"""

	baselines: BaselineConfig = BaselineConfig()
	window: WindowConfig = WindowConfig()
	detection: DetectionConfig = DetectionConfig()
	broadcast: BroadcastConfig = BroadcastConfig()
	simulation: SimulationConfig = SimulationConfig()


class Config(BaseSettings):
	"""
	Global configuration with environment overrides.
	"""

	model_config = SettingsConfigDict(
		env_prefix="SENTINEL_",
		env_file=".env",
		env_nested_delimiter="__",
		extra="ignore",
	)

	app_name: str = Field("stream_sentinel", description="Application name, also the log file stem")
	log_level: str = Field("INFO", description="Default logging level")
	logs_dir: Path = Field(Path("logs"), description="Directory for log files")
	stream: StreamConfig = StreamConfig()

	def model_post_init(self, __context: object) -> None:
		self.logs_dir.mkdir(parents=True, exist_ok=True)


config = Config()
