"""Batch Transfer — configuration-driven batch file copy/move.

Reads a list of transfer tasks from a JSON file, selects files by name
pattern and age, copies or moves them, and reports every failure per
file and per task without letting one failure abort the run.
"""

__version__ = "1.0.0"
__app_name__ = "Batch Transfer"
