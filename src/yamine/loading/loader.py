#!/usr/bin/env python3
"""
YAMINE DOCUMENT LOADER
----------------------
Reads a single source (file or text stream) and turns its content into an
ordered list of Documents.

JSON sources always produce exactly one Document. YAML sources produce one
Document per YAML document in the stream, split either by the parser
(SplitMode.SYNTAX) or on every literal '---' substring (SplitMode.MARKER).
In MARKER mode a '---' inside a scalar or block string is treated as a
document boundary as well; that is a known limitation of the mode.

Author: Yamine Maintainers
Date: 2026-10-18
"""

import json
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import BinaryIO, Dict, List, Optional, Sequence, Tuple

from ruamel.yaml import YAML, YAMLError

from yamine.core.errors import LoadError, LoadFailure
from yamine.core.models import Document, SourceFile, SourceFormat, SplitMode

YAML_DOCUMENT_MARKER = "---"
STDIN_NAME = "<stdin>"


def _reject_constant(name: str):
    raise ValueError(f"'{name}' is not valid JSON")


def _decode(data: bytes, name: str) -> str:
    try:
        return data.decode('utf-8-sig')
    except UnicodeDecodeError as e:
        raise LoadError(LoadFailure.IO, name, f"not valid UTF-8 ({e.reason})") from e


class DocumentLoader:
    """
    Parses sources into Documents. The first failure aborts: there is no
    partial recovery of a malformed file.
    """

    def __init__(self, split_mode: SplitMode = SplitMode.SYNTAX,
                 logger: Optional[logging.Logger] = None):
        self.split_mode = split_mode
        self.logger = logger or logging.getLogger("yamine.loader")
        self._local = threading.local()

    @property
    def yaml(self) -> YAML:
        """One parser per thread; ruamel parsers keep per-load state."""
        parser = getattr(self._local, "yaml", None)
        if parser is None:
            parser = self._local.yaml = YAML(typ='safe', pure=True)
        return parser

    def load(self, source: SourceFile) -> List[Document]:
        """Reads one SourceFile (BOM-aware UTF-8) and parses it."""
        try:
            data = source.path.read_bytes()
        except OSError as e:
            raise LoadError(LoadFailure.IO, source.name, e.strerror or str(e)) from e

        docs = self.load_text(_decode(data, source.name), source.format, source.name)
        self.logger.debug(f"Loaded {len(docs)} document(s) from {source.name}")
        return docs

    def load_stream(self, stream: BinaryIO, name: str = STDIN_NAME) -> List[Document]:
        """Reads a binary stream to the end and parses it as a UTF-8 YAML stream."""
        try:
            data = stream.read()
        except OSError as e:
            raise LoadError(LoadFailure.IO, name, str(e)) from e
        return self.load_text(_decode(data, name), SourceFormat.YAML, name)

    def load_text(self, text: str, fmt: SourceFormat, name: str) -> List[Document]:
        if fmt is SourceFormat.JSON:
            return [self._parse_json(text, name)]
        return self._parse_yaml_stream(text, name)

    def load_all(self, sources: Sequence[SourceFile], jobs: int = 1) -> Tuple[Document, ...]:
        """
        Builds the document batch: file order first, then in-file order.
        With jobs > 1 files are parsed on a thread pool and reassembled by
        selection index; the reported failure is the earliest file's.
        """
        if jobs <= 1 or len(sources) <= 1:
            return tuple(doc for source in sources for doc in self.load(source))

        results: Dict[int, List[Document]] = {}
        failures: Dict[int, LoadError] = {}

        with ThreadPoolExecutor(max_workers=jobs) as executor:
            future_to_index = {
                executor.submit(self.load, source): index
                for index, source in enumerate(sources)
            }
            for future in as_completed(future_to_index):
                index = future_to_index[future]
                try:
                    results[index] = future.result()
                except LoadError as e:
                    failures[index] = e

        if failures:
            raise failures[min(failures)]

        return tuple(doc for index in sorted(results) for doc in results[index])

    def _parse_json(self, text: str, name: str) -> Document:
        try:
            return Document.from_native(json.loads(text, parse_constant=_reject_constant))
        except ValueError as e:
            raise LoadError(LoadFailure.PARSE, name, str(e)) from e

    def _parse_yaml_stream(self, text: str, name: str) -> List[Document]:
        try:
            if self.split_mode is SplitMode.MARKER:
                # A blank segment loads as None, i.e. a Null document
                natives = [self.yaml.load(segment) for segment in text.split(YAML_DOCUMENT_MARKER)]
            else:
                natives = list(self.yaml.load_all(text))
            return [Document.from_native(native) for native in natives]
        except (YAMLError, TypeError) as e:
            raise LoadError(LoadFailure.PARSE, name, str(e)) from e
