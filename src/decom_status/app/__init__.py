"""Application entry point and runner for decom-status."""

from decom_status.app.runner import ApplicationRunner

__all__ = ["ApplicationRunner"]
