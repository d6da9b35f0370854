"""Shared modules for the vitals trend Lambda functions."""
