"""Core decommission status logic.

This package provides:
- Progress/ETA calculation (pure, stateless)
- Report assembly and rendering
- Alias store and admin API access
- Polling for watch mode
"""

from decom_status.core.calculation import classify, evaluate
from decom_status.core.report import (
    NO_POOLS_MESSAGE,
    DecommissionReport,
    build_report,
    render_report,
    render_view,
)

__all__ = [
    "NO_POOLS_MESSAGE",
    "DecommissionReport",
    "build_report",
    "classify",
    "evaluate",
    "render_report",
    "render_view",
]
