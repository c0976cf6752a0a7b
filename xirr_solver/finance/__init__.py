"""
Finance primitives.

Design:
- XIRR/NPV implementations live only in xirr_solver.finance.xirr (singleton).
- That module imports nothing from the rest of the package.
"""
