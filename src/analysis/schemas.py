"""Pydantic schemas for the sensor analysis endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class SensorReading(BaseModel):
    """One set of readings from the sensor rig; numeric strings are accepted."""

    model_config = ConfigDict(extra="ignore")

    ph: float
    tds: float
    orp: float
    color_r: float
    color_g: float
    color_b: float
    bme688: float

    def to_features(self) -> dict[str, float]:
        """Field names expected by the prediction service."""

        return {
            "ph": self.ph,
            "tds": self.tds,
            "orp": self.orp,
            "r": self.color_r,
            "g": self.color_g,
            "b": self.color_b,
            "bme688": self.bme688,
        }
