"""
XIRR of irregularly dated cash flows (Actual/365), matching spreadsheet XIRR.

The solver lives in xirr_solver.finance.xirr; everything else adapts inputs
(rows, DataFrames, CSV files, YAML settings) to it.
"""

from xirr_solver.finance.xirr import (
    MAX_ERROR,
    InvalidPayments,
    Payment,
    compute,
)

__all__ = ["MAX_ERROR", "InvalidPayments", "Payment", "compute"]
