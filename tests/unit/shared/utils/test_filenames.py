"""Tests for unique_filename and memory_usage_mb."""

import re

from taskpilot_bulk.shared.utils import memory_usage_mb, unique_filename


def test_suffix_appended_before_extension():
    name = unique_filename("projects.XLSX")

    assert re.fullmatch(r"projects_[0-9a-f]{8}\.xlsx", name)


def test_directories_are_stripped():
    assert unique_filename("../../etc/tasks.xlsx").startswith("tasks_")
    assert unique_filename("C:\\Users\\me\\tasks.xlsx").startswith("tasks_")


def test_whitespace_collapsed():
    assert unique_filename("Projects  Q1 .xlsx").startswith("Projects_Q1_")


def test_empty_name_uses_default_stem():
    assert re.fullmatch(r"upload_[0-9a-f]{8}", unique_filename(""))


def test_same_input_gives_distinct_names():
    names = {unique_filename("projects.xlsx") for _ in range(50)}

    assert len(names) == 50


def test_memory_usage_is_positive():
    assert memory_usage_mb() > 0
