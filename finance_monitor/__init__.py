"""
Finance Monitor - Source Package

Local personal-finance record keeping: transactions, tasks, bills, goals,
events and notes stored as JSON files, served to a UI process through named
request/response channels.

DESIGN PRINCIPLES:
1. The JSON files are the source of truth, re-read on every call
2. Every mutation returns an explicit result or raises
3. Nothing thrown inside a call crosses the bridge
4. Every mutation and failure is logged
"""

__version__ = "1.0.0"
__author__ = "Finance Monitor Team"
