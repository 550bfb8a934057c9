"""instmon: terminal dashboard over simulated instance telemetry."""

__version__ = "0.1.0"
