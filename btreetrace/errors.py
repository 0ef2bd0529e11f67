#!/usr/bin/env python3
"""
btreetrace Error Hierarchy
Canonical exception classes for the B-Tree trace engine.
"""

from enum import Enum

class ErrorCode(Enum):
    UNKNOWN = "UNKNOWN_ERROR"
    INVALID_DEGREE = "INVALID_DEGREE"
    INVALID_KEY = "INVALID_KEY"
    EXPORT_ERROR = "EXPORT_ERROR"
    NOT_FOUND = "NOT_FOUND"

class BTreeTraceError(Exception):
    """Base class for all btreetrace exceptions"""
    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN, details: dict = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

class InvalidDegreeError(BTreeTraceError, ValueError):
    """Raised when a branching factor below 3 (or not an integer) is requested"""
    def __init__(self, message: str, degree=None):
        super().__init__(message, ErrorCode.INVALID_DEGREE, {'degree': degree})

class KeyParseError(BTreeTraceError, ValueError):
    """Raised when key input contains no usable keys"""
    def __init__(self, message: str, text: str = None):
        super().__init__(message, ErrorCode.INVALID_KEY, {'text': text})

class ExportError(BTreeTraceError):
    """Raised when an export record cannot be written"""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, ErrorCode.EXPORT_ERROR, details)

class StepIndexError(BTreeTraceError, IndexError):
    """Raised when a step index lies outside the recorded log"""
    def __init__(self, message: str, index: int = None, size: int = None):
        super().__init__(message, ErrorCode.NOT_FOUND, {'index': index, 'size': size})
