"""End-to-end test harness for the Pinstack gateway API."""

__version__ = "0.1.0"
