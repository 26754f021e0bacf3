#!/usr/bin/env python3
"""
YAMINE COMBINER - Output Encodings
----------------------------------
Serializes a document batch into one of three artifacts:

  yaml       every document on its own, each opened by a '---' marker
  json-array [doc,doc,...]
  k8s-json   {"kind": "List", "apiVersion": "v1", "items": [doc,doc,...]}

Output is written to the sink one document at a time.

Author: Yamine Maintainers
Date: 2026-10-18
"""

import io
import json
import logging
from typing import Any, BinaryIO, Iterable, Optional

from ruamel.yaml import YAML, YAMLError
from ruamel.yaml.comments import CommentedKeyMap, CommentedKeySeq, CommentedMap, CommentedSeq

from yamine.core.errors import EncodeError, EncodeFailure
from yamine.core.models import Document, Encoding, NodeKind

K8S_LIST_PREFIX = '{"kind": "List", "apiVersion": "v1", "items": ['
K8S_LIST_SUFFIX = ']}'


class Combiner:
    """
    Writes Documents to a binary sink in the requested Encoding.
    """

    def __init__(self, coerce_keys: bool = False, logger: Optional[logging.Logger] = None):
        self.coerce_keys = coerce_keys
        self.logger = logger or logging.getLogger("yamine.combiner")

        self.yaml = YAML(typ='rt')
        self.yaml.explicit_start = True
        # Standard K8s layout: 2 spaces, sequences indented 4 (offset 2)
        self.yaml.indent(mapping=2, sequence=4, offset=2)
        self.yaml.width = 4096

    def encode(self, docs: Iterable[Document], encoding: Encoding, sink: BinaryIO):
        if encoding is Encoding.YAML_STREAM:
            for index, doc in enumerate(docs):
                self._write(sink, self._to_bytes(self.dumps_yaml(doc, index), index))
            return

        wrapped = encoding is Encoding.JSON_K8S_LIST
        self._write(sink, (K8S_LIST_PREFIX if wrapped else "[").encode('utf-8'))

        first = True
        for index, doc in enumerate(docs):
            element = self.dumps_json(doc, index)
            self._write(sink, self._to_bytes(element if first else "," + element, index))
            first = False

        self._write(sink, (K8S_LIST_SUFFIX if wrapped else "]").encode('utf-8'))

    def dumps_yaml(self, doc: Document, index: int = 0) -> str:
        """One standalone YAML document, always starting with '---'."""
        stream = io.StringIO()
        try:
            self.yaml.dump(self._to_yaml(doc), stream)
        except YAMLError as e:
            raise EncodeError(EncodeFailure.SERIALIZATION, str(e), index) from e
        return stream.getvalue()

    def dumps_json(self, doc: Document, index: int = 0) -> str:
        """Compact JSON text for a single document."""
        value = self._to_json(doc, index)
        try:
            return json.dumps(value, ensure_ascii=False, allow_nan=False, separators=(",", ":"))
        except ValueError as e:
            raise EncodeError(EncodeFailure.SERIALIZATION, str(e), index) from e

    def _to_yaml(self, doc: Document, as_key: bool = False) -> Any:
        if doc.kind is NodeKind.SEQUENCE:
            items = [self._to_yaml(item, as_key) for item in doc.value]
            return CommentedKeySeq(items) if as_key else CommentedSeq(items)
        if doc.kind is NodeKind.MAPPING:
            pairs = [(self._to_yaml(key, True), self._to_yaml(value, as_key)) for key, value in doc.value]
            return CommentedKeyMap(pairs) if as_key else CommentedMap(pairs)
        return doc.value

    def _to_json(self, doc: Document, index: int) -> Any:
        if doc.kind is NodeKind.SEQUENCE:
            return [self._to_json(item, index) for item in doc.value]
        if doc.kind is NodeKind.MAPPING:
            obj = {}
            for key, value in doc.value:
                name = self._json_key(key, index)
                if name in obj:
                    raise EncodeError(EncodeFailure.SERIALIZATION,
                                      f"duplicate key '{name}' after key coercion", index)
                obj[name] = self._to_json(value, index)
            return obj
        if not doc.is_finite:
            raise EncodeError(EncodeFailure.SERIALIZATION,
                              f"number {doc.value} cannot be represented in JSON", index)
        return doc.value

    def _json_key(self, key: Document, index: int) -> str:
        if key.kind is NodeKind.STRING:
            return key.value

        if not self.coerce_keys or not key.is_scalar or not key.is_finite:
            raise EncodeError(EncodeFailure.SERIALIZATION,
                              f"{key.kind.value} mapping key {key.to_native()!r} "
                              f"cannot be represented in JSON", index)

        name = json.dumps(key.value)
        self.logger.warning(f"Document {index}: coerced {key.kind.value} key {name} to a string")
        return name

    @staticmethod
    def _to_bytes(text: str, index: int) -> bytes:
        # Lone surrogates from JSON escapes such as "\ud800" have no UTF-8 form
        try:
            return text.encode('utf-8')
        except UnicodeEncodeError as e:
            raise EncodeError(EncodeFailure.SERIALIZATION, str(e), index) from e

    def _write(self, sink: BinaryIO, data: bytes):
        try:
            sink.write(data)
        except (OSError, ValueError) as e:
            raise EncodeError(EncodeFailure.WRITE, str(e)) from e
