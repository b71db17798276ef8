"""taskpilot-bulk: asynchronous spreadsheet import/export for the TaskPilot tracker."""

__version__ = "0.1.0"
