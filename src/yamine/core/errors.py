#!/usr/bin/env python3
"""
YAMINE ERRORS
-------------
Failure taxonomy for the combination pipeline. Only SelectionError is
recovered locally (the offending entry is skipped); every other error
aborts the run and is reported once by the engine.

Author: Yamine Maintainers
Date: 2026-10-18
"""

from enum import Enum
from pathlib import Path
from typing import Optional, Union


class YamineError(Exception):
    """Base class for all pipeline failures."""


class SelectionError(YamineError):
    """A directory entry could not be inspected during discovery."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Skipping '{self.path}': {reason}")


class LoadFailure(Enum):
    IO = "io"
    PARSE = "parse"


class LoadError(YamineError):
    """A source could not be read or parsed."""

    def __init__(self, failure: LoadFailure, source: str, detail: str):
        self.failure = failure
        self.source = source
        self.detail = detail
        label = "Unable to read" if failure is LoadFailure.IO else "Unable to parse"
        super().__init__(f"{label} '{source}': {detail}")


class EncodeFailure(Enum):
    SERIALIZATION = "serialization"
    WRITE = "write"


class EncodeError(YamineError):
    """The combined output could not be produced or written."""

    def __init__(self, failure: EncodeFailure, detail: str, index: Optional[int] = None):
        self.failure = failure
        self.detail = detail
        self.index = index
        if failure is EncodeFailure.WRITE:
            message = f"Unable to write output: {detail}"
        else:
            message = f"Unable to serialize document #{index}: {detail}"
        super().__init__(message)
