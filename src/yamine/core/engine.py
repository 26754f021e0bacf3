#!/usr/bin/env python3
"""
YAMINE ENGINE - The Run Orchestrator
------------------------------------
CombineEngine runs one combination: select files, load every document in
file order, encode the batch and send it to the chosen destination.

Destinations are picked from a single RunMode:
  WRITE    create/truncate the output file and write the artifact
  STDOUT   stream the artifact to standard output
  PREVIEW  describe the run (inputs, destination, encoding) and write nothing

Failures are reported once through the injected logger. Writes are not
atomic: a failed WRITE run may leave a partially written output file.

Author: Yamine Maintainers
Date: 2026-10-18
"""

import sys
import logging
from typing import BinaryIO, Callable, Optional, Tuple

from yamine.combining.encoder import Combiner
from yamine.core.errors import EncodeError, EncodeFailure, YamineError
from yamine.core.models import Document, Encoding, RunConfig, RunMode, RunPlan
from yamine.discovery.selector import FileSelector
from yamine.loading.loader import STDIN_NAME, DocumentLoader

EXIT_OK = 0
EXIT_FAILURE = 1


class CombineEngine:
    """
    Principal orchestrator. Collaborators are created from the RunConfig
    unless injected; the logger is the only diagnostic sink it writes to.
    """

    def __init__(self, config: RunConfig,
                 selector: Optional[FileSelector] = None,
                 loader: Optional[DocumentLoader] = None,
                 combiner: Optional[Combiner] = None,
                 logger: Optional[logging.Logger] = None,
                 previewer: Optional[Callable[[RunPlan], None]] = None,
                 stdin: Optional[BinaryIO] = None,
                 stdout: Optional[BinaryIO] = None):
        self.config = config
        self.logger = logger or logging.getLogger("yamine.engine")
        self.selector = selector or FileSelector(config.include_hidden, self.logger, config.use_ignore_files)
        self.loader = loader or DocumentLoader(config.split_mode, self.logger)
        self.combiner = combiner or Combiner(config.coerce_keys, self.logger)
        self.previewer = previewer or self._log_plan
        self.stdin = stdin
        self.stdout = stdout

    def plan(self) -> RunPlan:
        """Resolves the inputs without reading them."""
        files = () if self.config.from_stdin else tuple(
            self.selector.select(self.config.roots, self.config.max_depth)
        )

        notes = []
        if self.config.coerce_keys and self.config.encoding is not Encoding.YAML_STREAM:
            notes.append("Non-string scalar mapping keys will be converted to strings.")
        if not self.config.from_stdin and not files:
            notes.append("No .yaml or .json files were found.")

        return RunPlan(
            files=files,
            destination=self._destination_label(),
            encoding=self.config.encoding,
            from_stdin=self.config.from_stdin,
            notes=tuple(notes),
        )

    def collect(self, plan: RunPlan) -> Tuple[Document, ...]:
        """Loads the document batch for a plan."""
        if plan.from_stdin:
            stream = self.stdin or sys.stdin.buffer
            return tuple(self.loader.load_stream(stream, STDIN_NAME))
        return self.loader.load_all(plan.files, jobs=self.config.jobs)

    def run(self) -> int:
        """Executes the configured run and returns the exit status."""
        try:
            plan = self.plan()

            if self.config.mode is RunMode.PREVIEW:
                self.previewer(plan)
                return EXIT_OK

            docs = self.collect(plan)
            self.logger.info(f"Combining {len(docs)} document(s) as {plan.encoding}")

            if self.config.mode is RunMode.STDOUT:
                self._stream(docs, plan)
            else:
                self._write_file(docs, plan)

        except YamineError as e:
            self.logger.error(f"Unable to combine files: {e}")
            return EXIT_FAILURE

        self.logger.info("Ran successfully")
        return EXIT_OK

    def _stream(self, docs: Tuple[Document, ...], plan: RunPlan):
        sink = self.stdout or sys.stdout.buffer
        try:
            self.combiner.encode(docs, plan.encoding, sink)
        finally:
            try:
                sink.flush()
            except OSError as e:
                raise EncodeError(EncodeFailure.WRITE, str(e)) from e

    def _write_file(self, docs: Tuple[Document, ...], plan: RunPlan):
        try:
            with open(self.config.output, 'wb') as sink:
                self.combiner.encode(docs, plan.encoding, sink)
        except OSError as e:
            raise EncodeError(EncodeFailure.WRITE, f"{self.config.output}: {e.strerror or e}") from e
        self.logger.info(f"Wrote {len(docs)} document(s) to {self.config.output}")

    def _destination_label(self) -> str:
        if self.config.mode is RunMode.STDOUT:
            return "<stdout>"
        return self.config.output

    def _log_plan(self, plan: RunPlan):
        source = STDIN_NAME if plan.from_stdin else f"{len(plan.files)} file(s)"
        self.logger.info(f"Dry run: would combine {source} into {plan.destination} as {plan.encoding}")
        for source_file in plan.files:
            self.logger.info(f"  {source_file.name}")
