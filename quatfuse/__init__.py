"""Gradient-descent orientation estimation from gyroscope and accelerometer data."""

from pathlib import Path

PACKAGE_ROOT = Path(__file__).parent

__version__ = "0.1.0"
