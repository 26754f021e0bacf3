#!/usr/bin/env python3
"""
YAMINE CORE MODELS
------------------
Defines the fundamental data structures shared by every stage of the
combination pipeline: the generic Document value, the SourceFile handed
from discovery to loading, and the enumerations that steer a run.

Author: Yamine Maintainers
Date: 2026-10-18
"""

import datetime
import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Tuple


class NodeKind(Enum):
    """The variants a Document can take."""
    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


@dataclass(frozen=True)
class Document:
    """
    An immutable tagged value able to hold anything YAML or JSON can express.

    SEQUENCE values are a tuple of Documents. MAPPING values are a tuple of
    (key Document, value Document) pairs in insertion order; keys are not
    restricted to strings.
    """
    kind: NodeKind
    value: Any = None

    @classmethod
    def from_native(cls, obj: Any) -> "Document":
        """
        Converts parser output (dicts, lists, scalars) into a Document.
        Raises TypeError for values with no Document variant.
        """
        if obj is None:
            return cls(NodeKind.NULL)
        # bool is an int subclass, so it has to be checked first
        if isinstance(obj, bool):
            return cls(NodeKind.BOOL, obj)
        if isinstance(obj, (int, float)):
            return cls(NodeKind.NUMBER, obj)
        if isinstance(obj, str):
            return cls(NodeKind.STRING, obj)
        if isinstance(obj, (datetime.date, datetime.datetime)):
            # YAML timestamps have no JSON counterpart; keep their ISO text
            return cls(NodeKind.STRING, obj.isoformat())
        if isinstance(obj, dict):
            return cls(NodeKind.MAPPING, tuple(
                (cls.from_native(key), cls.from_native(value))
                for key, value in obj.items()
            ))
        if isinstance(obj, (list, tuple)):
            return cls(NodeKind.SEQUENCE, tuple(cls.from_native(item) for item in obj))
        raise TypeError(f"Unsupported value of type '{type(obj).__name__}'")

    def to_native(self) -> Any:
        """
        Converts back to plain Python values. Sequence keys become tuples so
        they stay hashable; mapping keys cannot be expressed and raise TypeError.
        """
        if self.kind is NodeKind.SEQUENCE:
            return [item.to_native() for item in self.value]
        if self.kind is NodeKind.MAPPING:
            return {key._to_hashable(): value.to_native() for key, value in self.value}
        return self.value

    def _to_hashable(self) -> Any:
        if self.kind is NodeKind.SEQUENCE:
            return tuple(item._to_hashable() for item in self.value)
        if self.kind is NodeKind.MAPPING:
            raise TypeError("A mapping cannot be used as a native dictionary key")
        return self.value

    @property
    def is_scalar(self) -> bool:
        return self.kind not in (NodeKind.SEQUENCE, NodeKind.MAPPING)

    @property
    def is_finite(self) -> bool:
        """False for NaN or infinite numbers, which JSON cannot carry."""
        if self.kind is NodeKind.NUMBER and isinstance(self.value, float):
            return math.isfinite(self.value)
        return True


class SourceFormat(Enum):
    YAML = "yaml"
    JSON = "json"


# Case-sensitive: `.YAML` and `.yml` are not picked up
EXTENSION_FORMATS = {
    ".yaml": SourceFormat.YAML,
    ".json": SourceFormat.JSON,
}


@dataclass(frozen=True)
class SourceFile:
    """A resolved input path and the format inferred from its extension."""
    path: Path
    format: SourceFormat

    @classmethod
    def from_path(cls, path: Path) -> Optional["SourceFile"]:
        """
        Builds a SourceFile when the entry name carries a supported
        extension. Returns None for every other file.
        """
        fmt = EXTENSION_FORMATS.get(Path(path).suffix)
        if fmt is None:
            return None
        return cls(path=Path(path).resolve(), format=fmt)

    @property
    def name(self) -> str:
        return str(self.path)


class Encoding(Enum):
    """Output encodings for the combined artifact."""
    YAML_STREAM = "yaml"
    JSON_ARRAY = "json-array"
    JSON_K8S_LIST = "k8s-json"

    @classmethod
    def parse(cls, name: str) -> "Encoding":
        """Resolves a user-facing encoding name, synonyms included."""
        try:
            return ENCODING_ALIASES[name.strip().lower()]
        except KeyError:
            choices = ", ".join(sorted(ENCODING_ALIASES))
            raise ValueError(f"Unknown format '{name}'. Options are: {choices}") from None

    def __str__(self) -> str:
        return self.value


ENCODING_ALIASES = {
    "yaml": Encoding.YAML_STREAM,
    "json-array": Encoding.JSON_ARRAY,
    "json": Encoding.JSON_ARRAY,
    "k8s-json": Encoding.JSON_K8S_LIST,
    "kubernetes-json": Encoding.JSON_K8S_LIST,
    "json-k8s": Encoding.JSON_K8S_LIST,
}


class RunMode(Enum):
    """What a run does with the combined output."""
    WRITE = "write"
    STDOUT = "stdout"
    PREVIEW = "preview"


class SplitMode(Enum):
    """
    How a YAML stream is cut into documents.

    SYNTAX relies on the YAML parser to find document boundaries. MARKER
    splits on every literal '---' substring, including ones inside scalars.
    """
    SYNTAX = "syntax"
    MARKER = "marker"


@dataclass(frozen=True)
class RunConfig:
    """Everything a single combination run needs. Built once by the CLI."""
    roots: Tuple[str, ...] = ()
    max_depth: int = 1
    output: str = "combined.yaml"
    mode: RunMode = RunMode.PREVIEW
    encoding: Encoding = Encoding.YAML_STREAM
    split_mode: SplitMode = SplitMode.SYNTAX
    include_hidden: bool = False
    use_ignore_files: bool = True
    coerce_keys: bool = False
    jobs: int = 1

    @property
    def from_stdin(self) -> bool:
        """Without roots the selector is bypassed and stdin is read instead."""
        return not self.roots


@dataclass(frozen=True)
class RunPlan:
    """What a run would read and where it would write. Rendered by previews."""
    files: Tuple[SourceFile, ...]
    destination: str
    encoding: Encoding
    from_stdin: bool = False
    notes: Tuple[str, ...] = field(default_factory=tuple)
