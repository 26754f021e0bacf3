#!/usr/bin/env python3
"""
YAMINE ENGINE SUITE - End-to-End Runs
-------------------------------------
Drives CombineEngine through every run mode against real files:
1. WRITE creates/truncates the output file
2. STDOUT streams the artifact
3. PREVIEW resolves inputs and writes nothing
4. Failures are reported once and leave the exit status at 1
"""

import io
import json
import logging
from pathlib import Path

import pytest

from yamine.core.engine import EXIT_FAILURE, EXIT_OK, CombineEngine
from yamine.core.models import Encoding, RunConfig, RunMode, SplitMode

FIXTURES = Path(__file__).parent / "fixtures" / "manifests"


@pytest.fixture
def sources(tmp_path):
    (tmp_path / "a.json").write_text('{"x":1}')
    (tmp_path / "b.yaml").write_text("y: 2\n---\nz: 3")
    return [str(tmp_path / "a.json"), str(tmp_path / "b.yaml")]


def _stream(config: RunConfig, **kwargs) -> bytes:
    sink = io.BytesIO()
    status = CombineEngine(config, stdout=sink, **kwargs).run()
    assert status == EXIT_OK
    return sink.getvalue()


def test_json_array_end_to_end(sources):
    config = RunConfig(roots=tuple(sources), mode=RunMode.STDOUT, encoding=Encoding.JSON_ARRAY)
    assert _stream(config) == b'[{"x":1},{"y":2},{"z":3}]'


def test_k8s_list_end_to_end(sources):
    config = RunConfig(roots=tuple(sources), mode=RunMode.STDOUT, encoding=Encoding.JSON_K8S_LIST)

    combined = json.loads(_stream(config))

    assert combined["kind"] == "List"
    assert combined["apiVersion"] == "v1"
    assert combined["items"] == [{"x": 1}, {"y": 2}, {"z": 3}]


def test_write_mode_creates_the_output_file(sources, tmp_path):
    output = tmp_path / "out" / "combined.yaml"
    output.parent.mkdir()
    output.write_text("stale content that must disappear\n" * 10)
    config = RunConfig(roots=tuple(sources), mode=RunMode.WRITE, output=str(output))

    assert CombineEngine(config).run() == EXIT_OK

    text = output.read_text()
    assert text.startswith("---")
    assert "stale" not in text


def test_written_yaml_reloads_to_the_same_documents(sources, tmp_path):
    output = tmp_path / "combined.yaml"
    CombineEngine(RunConfig(roots=tuple(sources), mode=RunMode.WRITE, output=str(output))).run()

    reread = RunConfig(roots=(str(output),), mode=RunMode.STDOUT, encoding=Encoding.JSON_ARRAY)
    assert _stream(reread) == b'[{"x":1},{"y":2},{"z":3}]'


def test_preview_writes_nothing(sources, tmp_path):
    output = tmp_path / "combined.yaml"
    plans = []
    config = RunConfig(roots=tuple(sources), output=str(output))

    status = CombineEngine(config, previewer=plans.append).run()

    assert status == EXIT_OK
    assert not output.exists()
    assert len(plans) == 1
    assert [source.path.name for source in plans[0].files] == ["a.json", "b.yaml"]
    assert plans[0].destination == str(output)
    assert plans[0].encoding is Encoding.YAML_STREAM


def test_preview_does_not_parse_files(tmp_path):
    (tmp_path / "broken.json").write_text("{not json")
    plans = []

    status = CombineEngine(RunConfig(roots=(str(tmp_path),)), previewer=plans.append).run()

    assert status == EXIT_OK
    assert len(plans[0].files) == 1


def test_default_preview_logs_the_plan(sources, caplog):
    with caplog.at_level(logging.INFO, logger="yamine.engine"):
        CombineEngine(RunConfig(roots=tuple(sources))).run()

    assert "Dry run" in caplog.text
    assert "b.yaml" in caplog.text


def test_preview_mentions_key_coercion(sources):
    plans = []
    config = RunConfig(roots=tuple(sources), encoding=Encoding.JSON_ARRAY, coerce_keys=True)

    CombineEngine(config, previewer=plans.append).run()

    assert any("converted to strings" in note for note in plans[0].notes)


def test_parse_failure_aborts_the_run(tmp_path, caplog):
    (tmp_path / "a.yaml").write_text("ok: 1")
    (tmp_path / "b.json").write_text("{broken")
    sink = io.BytesIO()
    config = RunConfig(roots=(str(tmp_path),), mode=RunMode.STDOUT, encoding=Encoding.JSON_ARRAY)

    with caplog.at_level(logging.ERROR, logger="yamine.engine"):
        status = CombineEngine(config, stdout=sink).run()

    assert status == EXIT_FAILURE
    assert sink.getvalue() == b""
    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert "b.json" in errors[0].getMessage()


def test_encode_failure_may_leave_partial_output(tmp_path):
    """Writes are not atomic: documents before the failing one stay on disk."""
    (tmp_path / "a.json").write_text('{"fine": true}')
    (tmp_path / "b.yaml").write_text("1: non-string key")
    output = tmp_path / "out.json"
    config = RunConfig(roots=(str(tmp_path),), mode=RunMode.WRITE,
                       output=str(output), encoding=Encoding.JSON_ARRAY)

    assert CombineEngine(config).run() == EXIT_FAILURE
    assert output.read_bytes() == b'[{"fine":true}'


def test_unwritable_destination_is_a_failure(sources, tmp_path):
    config = RunConfig(roots=tuple(sources), mode=RunMode.WRITE,
                       output=str(tmp_path / "missing" / "dir" / "out.yaml"))
    assert CombineEngine(config).run() == EXIT_FAILURE


def test_stdin_is_read_when_no_roots_are_given():
    config = RunConfig(mode=RunMode.STDOUT, encoding=Encoding.JSON_ARRAY)
    stdin = io.BytesIO(b"a: 1\n---\nb: 2\n")

    assert _stream(config, stdin=stdin) == b'[{"a":1},{"b":2}]'


def test_stdin_honours_marker_split():
    config = RunConfig(mode=RunMode.STDOUT, encoding=Encoding.JSON_ARRAY, split_mode=SplitMode.MARKER)
    stdin = io.BytesIO(b"---\na: 1\n")

    assert _stream(config, stdin=stdin) == b'[null,{"a":1}]'


@pytest.mark.parametrize("jobs", [1, 3])
def test_fixture_manifests_combine_in_selection_order(jobs):
    config = RunConfig(roots=(str(FIXTURES),), max_depth=2, mode=RunMode.STDOUT,
                       encoding=Encoding.JSON_K8S_LIST, jobs=jobs)

    items = json.loads(_stream(config))["items"]

    assert [item["kind"] for item in items] == ["Deployment", "Service", "ConfigMap", "Secret"]
    assert items[2]["data"]["GREETING"] == "grüezi"


def test_empty_selection_still_produces_valid_output(tmp_path):
    config = RunConfig(roots=(str(tmp_path),), mode=RunMode.STDOUT, encoding=Encoding.JSON_K8S_LIST)
    assert _stream(config) == b'{"kind": "List", "apiVersion": "v1", "items": []}'
