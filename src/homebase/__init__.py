"""Homebase: task-lifecycle engine for a personal task-and-routine tracker."""

__version__ = "0.1.0"
