"""Chunk assembler tests: recovery shapes, chunk-boundary invariance, bounds."""
from __future__ import annotations

import json
import random

from sse_pacer.streaming.chunk_assembler import ChunkAssembler, extract_json_objects

OBJECTS = [
    {"id": 1, "text": "plain"},
    {"id": 2, "text": "braces } { inside", "nested": {"deep": [1, {"x": "y"}]}},
    {"id": 3, "text": 'escaped \\" quote and \\\\ slash'},
    {"id": 4, "text": "unicode é中", "list": []},
    {"id": 5, "text": "spaced   out words"},
]
STREAM = "".join(json.dumps(o, ensure_ascii=False) for o in OBJECTS)


def _feed_all(pieces: list[str]) -> list[dict]:
    asm = ChunkAssembler()
    out: list[dict] = []
    for piece in pieces:
        out.extend(asm.feed(piece))
    out.extend(asm.finish())
    return out


def test_scenario_back_to_back_objects_yield_two():
    assert _feed_all(['{"a":1}{"b":2}']) == [{"a": 1}, {"b": 2}]  # nosec B101


def test_whole_stream_in_one_piece():
    assert _feed_all([STREAM]) == OBJECTS  # nosec B101


def test_every_two_way_split_is_equivalent():
    for i in range(1, len(STREAM)):
        assert _feed_all([STREAM[:i], STREAM[i:]]) == OBJECTS, i  # nosec B101


def test_random_multi_way_splits_are_equivalent():
    rng = random.Random(1234)
    for _ in range(200):
        cuts = sorted(rng.sample(range(1, len(STREAM)), k=rng.randint(2, 12)))
        bounds = [0, *cuts, len(STREAM)]
        pieces = [STREAM[a:b] for a, b in zip(bounds, bounds[1:])]
        assert _feed_all(pieces) == OBJECTS  # nosec B101


def test_done_sentinel_is_idempotent():
    asm = ChunkAssembler()
    for _ in range(3):
        assert asm.feed("[DONE]") == []  # nosec B101
        assert asm.feed("  [DONE]\n") == []  # nosec B101
    assert asm.finish() == []  # nosec B101
    assert asm.parsed_count == 0 and asm.pending == ""  # nosec B101


def test_nul_characters_are_stripped():
    assert _feed_all(['\x00{"a":\x001}\x00']) == [{"a": 1}]  # nosec B101


def test_line_break_inside_string_value_is_removed():
    assert _feed_all(['{"text":"hel\nlo"}']) == [{"text": "hello"}]  # nosec B101


def test_embedded_data_markers_are_split():
    payload = '{"a":1}\ndata: {"b":2}\ndata: [DONE]'
    assert _feed_all([payload]) == [{"a": 1}, {"b": 2}]  # nosec B101


def test_top_level_array_forwards_object_elements():
    asm = ChunkAssembler()
    assert asm.feed('[{"a":1}, 2, {"b":2}]') == [{"a": 1}, {"b": 2}]  # nosec B101
    assert asm.parsed_count == 1  # nosec B101


def test_scalars_are_counted_not_emitted():
    asm = ChunkAssembler()
    assert asm.feed("42") == []  # nosec B101
    assert asm.parsed_count == 1  # nosec B101


def test_malformed_object_is_skipped_and_logged(log_records):
    assert _feed_all(['{"a":}{"b":1}']) == [{"b": 1}]  # nosec B101
    events = [r for r in log_records if r.get("event") == "stream.decode_error"]
    assert events and events[0]["error_code"] == "protocol"  # nosec B101


def test_eviction_keeps_trailing_window(log_records):
    asm = ChunkAssembler(cap=100, keep=20)
    asm.feed('{"a":"' + "x" * 200)
    assert len(asm.pending) == 20  # nosec B101
    assert any(r.get("event") == "stream.buffer.evicted" for r in log_records)  # nosec B101


def test_finish_reparses_raw_log_when_nothing_parsed():
    asm = ChunkAssembler(cap=10, keep=5)
    assert asm.feed('{"text":"hel') == []  # nosec B101 - evicted to a useless tail
    assert asm.feed('lo"}') == []  # nosec B101
    assert asm.finish() == [{"text": "hello"}]  # nosec B101


def test_extract_json_objects_rest_handling():
    objs, rest = extract_json_objects('junk}{"a":1} tail {"b":')
    assert objs == ['{"a":1}'] and rest == '{"b":'  # nosec B101
    objs, rest = extract_json_objects('{"a":1} trailing words')
    assert objs == ['{"a":1}'] and rest == ""  # nosec B101
    objs, rest = extract_json_objects('{"s":"}"')
    assert objs == [] and rest == '{"s":"}"'  # nosec B101


def test_received_and_parsed_counts_track_garbage():
    asm = ChunkAssembler()
    asm.feed("[DONE]")
    asm.feed("   ")
    assert asm.received_count == 0  # nosec B101
    asm.feed("<html>oops</html>")
    assert asm.finish() == []  # nosec B101
    assert asm.received_count == 1 and asm.parsed_count == 0  # nosec B101
