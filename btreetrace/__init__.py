#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
btreetrace - step-recording B-Tree engine
Exports all main components for clean imports
"""

from .errors import (
    ErrorCode, BTreeTraceError, InvalidDegreeError, KeyParseError,
    ExportError, StepIndexError,
)
from .node import BTreeNode
from .steps import Step, StepTag, StepRecorder, STEP_ICONS
from .btree import BTree, SplitPolicy
from .keys import parse_keys, parse_degree
from .export import build_export_record, export_filename, write_export
from .player import StepPlayer
from .session import TraceSession

__version__ = "1.0.0"

__all__ = [
    'ErrorCode', 'BTreeTraceError', 'InvalidDegreeError', 'KeyParseError',
    'ExportError', 'StepIndexError',
    'BTreeNode', 'Step', 'StepTag', 'StepRecorder', 'STEP_ICONS',
    'BTree', 'SplitPolicy',
    'parse_keys', 'parse_degree',
    'build_export_record', 'export_filename', 'write_export',
    'StepPlayer', 'TraceSession',
]
