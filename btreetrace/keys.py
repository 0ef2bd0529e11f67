#!/usr/bin/env python3
"""
Key input parsing for the trace engine.

The engine itself never validates keys; free text is turned into integers
here. A token keeps its leading integer ("12abc" -> 12, "3.7" -> 3) and is
dropped when it has none.
"""

import re
import logging
from typing import List, Optional

from .errors import InvalidDegreeError

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')


def parse_int(token: str) -> Optional[int]:
    """Leading base-10 integer of token, or None"""
    match = _LEADING_INT.match(token)
    if match is None:
        return None
    return int(match.group(1))


def parse_keys(text: str) -> List[int]:
    """
    Parse a comma-separated key list

    Args:
        text: e.g. "10" or "10, 20,30"

    Returns:
        Parsed keys in input order; unparseable tokens are skipped
    """
    keys = []
    for token in (part.strip() for part in text.split(',')):
        if not token:
            continue
        value = parse_int(token)
        if value is None:
            logger.debug(f"Skipping non-numeric key token {token!r}")
            continue
        keys.append(value)
    return keys


def parse_degree(text: str) -> int:
    """Parse a branching factor, rejecting non-integers and values below 3"""
    value = parse_int(str(text))
    if value is None:
        raise InvalidDegreeError(f"maxDegree must be an integer, got {text!r}", text)
    if value < 3:
        raise InvalidDegreeError("maxDegree must be at least 3", value)
    return value
