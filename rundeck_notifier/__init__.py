"""Trigger Rundeck jobs from CI builds and track their executions."""

__version__ = "0.1.0"
