"""Test doubles for the sensor acquisition collaborator."""

from fakes.fake_sensors import FakeSensorSource, SensorReadError

__all__ = ["FakeSensorSource", "SensorReadError"]
