"""Tests for the stdio JSON-lines transport."""

import asyncio
import io
import json

from finance_monitor.bridge import handle_line, serve


def run_lines(bridge, *lines):
    reader = io.StringIO("".join(line + "\n" for line in lines))
    writer = io.StringIO()
    answered = asyncio.run(serve(bridge, reader, writer))
    responses = [json.loads(line) for line in writer.getvalue().splitlines()]
    return answered, responses


class TestServe:

    def test_request_response_pairs(self, bridge):
        answered, responses = run_lines(
            bridge,
            json.dumps({"id": 1, "channel": "get-categories"}),
            json.dumps({"id": 2, "channel": "get-tasks", "payload": "u1"}),
        )

        assert answered == 2
        assert [r["id"] for r in responses] == [1, 2]
        assert len(responses[0]["response"]["categories"]) == 12
        assert responses[1]["response"] == {"success": True, "tasks": []}

    def test_blank_lines_skipped(self, bridge):
        answered, responses = run_lines(bridge, "", json.dumps({"id": "a", "channel": "get-notes", "payload": "u1"}), "  ")
        assert answered == 1
        assert responses[0]["id"] == "a"

    def test_mutation_through_transport(self, bridge, storage):
        run_lines(bridge, json.dumps({
            "id": 7,
            "channel": "add-note",
            "payload": {"userId": "u1", "note": {"title": "Budget", "content": "draft"}},
        }))
        assert [n.title for n in storage.get_all_notes("u1")] == ["Budget"]


class TestHandleLine:

    def test_malformed_json(self, bridge):
        response = asyncio.run(handle_line(bridge, "{nope"))

        assert response["id"] is None
        assert response["response"]["success"] is False
        assert response["response"]["error"].startswith("Malformed request")

    def test_not_an_object(self, bridge):
        response = asyncio.run(handle_line(bridge, "[1, 2]"))
        assert response["response"]["success"] is False

    def test_missing_channel(self, bridge):
        response = asyncio.run(handle_line(bridge, json.dumps({"id": 3, "payload": {}})))

        assert response["id"] == 3
        assert response["response"] == {"success": False, "error": "Malformed request: missing channel"}

    def test_unknown_channel_keeps_id(self, bridge):
        response = asyncio.run(handle_line(bridge, json.dumps({"id": 4, "channel": "nope"})))

        assert response == {"id": 4, "response": {"success": False, "error": "Unknown channel: nope"}}
