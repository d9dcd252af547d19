#!/usr/bin/env python3
"""
Custom exceptions for the razor trigger monitor

Provides a hierarchy of exceptions for better error handling and diagnostics.
All custom exceptions inherit from RazorMonitorError for easy catching.

Per-event pathologies (missing collections, odd hemisphere multiplicities,
degenerate kinematics) are never raised; they are skipped or logged by the
monitor itself.
"""


class RazorMonitorError(Exception):
    """
    Base exception for all razor monitor errors

    All custom exceptions inherit from this class, allowing users to catch
    all monitor-specific errors with a single except clause.
    """
    pass


class ConfigurationError(RazorMonitorError):
    """
    Raised when configuration is invalid or missing required fields

    Examples:
    - Missing required config file
    - Bin edges not strictly increasing
    - Negative jet multiplicity
    - Unparsable cut string
    """
    pass


class DataLoadError(RazorMonitorError):
    """
    Raised when event files cannot be loaded

    Examples:
    - File not found
    - Corrupted ROOT file
    - Missing tree in ROOT file
    """
    pass


class BranchMissingError(RazorMonitorError):
    """
    Raised when a required branch is not found in the input

    Examples:
    - Missing MET branches for the configured tag
    - Tag typo in configuration
    """
    def __init__(self, branch_name: str, file_path: str = None):
        """
        Initialize BranchMissingError

        Args:
            branch_name: Name of the missing branch
            file_path: Optional path to the file being read
        """
        self.branch_name = branch_name
        self.file_path = file_path

        message = f"Required branch '{branch_name}' not found"
        if file_path:
            message += f" in file: {file_path}"

        super().__init__(message)


class SelectionError(RazorMonitorError):
    """
    Raised when an object selection cannot be evaluated

    Examples:
    - Cut string refers to an attribute the object does not have
    """
    pass


class HistogramError(RazorMonitorError):
    """
    Raised when histogram booking or storage fails

    Examples:
    - Booking the same histogram path twice
    - Filling a 2D histogram with a single coordinate
    """
    pass
