"""
Bulk import/export constants.

Column layouts shared by the importer headers, the exporter headers and the
row projections. Changing a tuple here changes the file format users see.
"""

from datetime import timedelta

# Required headers of an import file (matched case-insensitively, any order)
PROJECT_IMPORT_HEADERS: tuple[str, ...] = ("name", "description", "color")
TASK_IMPORT_HEADERS: tuple[str, ...] = (
    "project_id",
    "title",
    "assignee_email",
    "description",
    "status",
    "priority",
    "due_date",
)

# Domain columns of an export file; the exporter wraps them as
# id, <columns>, created_at, updated_at
PROJECT_EXPORT_COLUMNS: tuple[str, ...] = ("name", "description", "color")
TASK_EXPORT_COLUMNS: tuple[str, ...] = (
    "project_id",
    "title",
    "assignee_id",
    "description",
    "status",
    "priority",
    "due_date",
)

EXPORT_LEADING_COLUMNS: tuple[str, ...] = ("id",)
EXPORT_TRAILING_COLUMNS: tuple[str, ...] = ("created_at", "updated_at")

# Sheet titles of generated export workbooks
PROJECT_SHEET_NAME = "projects"
TASK_SHEET_NAME = "tasks"

# Validity of export download links
RESULT_URL_TTL = timedelta(minutes=10)

# Content type of generated and uploaded workbooks
XLSX_CONTENT_TYPE = (
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
)
