"""Decom Status - report progress and ETA of storage pool decommissioning.

This package queries a cluster's administrative API for server pool status
and turns raw decommission byte counters into a progress percentage,
transfer rate and estimated time of completion for every draining pool.
"""

from decom_status.app.cli import main

__all__ = ["main"]
