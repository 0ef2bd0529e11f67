#!/usr/bin/env python3
"""
Tree export records.

An export captures the degree-derived counters and one tree snapshot:

    {
      "maxDegree": 4, "maxKeys": 3, "minChildren": 2, "minKeys": 1,
      "tree": {"keys": [...], "children": [...], "isLeaf": false},
      "timestamp": "2026-01-01T12:00:00+00:00"
    }
"""

import json
import logging
from pathlib import Path
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from .errors import ExportError
from .node import BTreeNode

logger = logging.getLogger(__name__)


def build_export_record(max_degree: int, snapshot: BTreeNode,
                        now: Optional[datetime] = None) -> Dict[str, Any]:
    """Assemble the export record for one snapshot"""
    now = now or datetime.now(timezone.utc)
    min_children = (max_degree + 1) // 2
    return {
        "maxDegree": max_degree,
        "maxKeys": max_degree - 1,
        "minChildren": min_children,
        "minKeys": min_children - 1,
        "tree": snapshot.to_dict(),
        "timestamp": now.isoformat(),
    }


def export_filename(max_degree: int, now: Optional[datetime] = None) -> str:
    """btree-maxdegree{m}-{epoch milliseconds}.json"""
    now = now or datetime.now(timezone.utc)
    return f"btree-maxdegree{max_degree}-{int(now.timestamp() * 1000)}.json"


def write_export(record: Dict[str, Any], directory: Union[str, Path] = ".",
                 filename: Optional[str] = None) -> Path:
    """
    Write an export record as indented JSON

    Returns:
        Path of the written file
    """
    directory = Path(directory)
    path = directory / (filename or export_filename(record["maxDegree"]))
    try:
        directory.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(record, f, indent=2)
    except OSError as e:
        raise ExportError(f"Failed to write export to {path}: {e}", {'path': str(path)}) from e

    logger.info(f"Exported tree (maxDegree={record['maxDegree']}) to {path}")
    return path
