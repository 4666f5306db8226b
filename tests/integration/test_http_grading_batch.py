# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Integration test for batch grading against a local HTTP grading endpoint.

Text files are read from disk and graded over a real HTTP connection. Only
the DynamoDB result store is mocked.
"""

import json
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from unittest.mock import MagicMock

import pytest
from aithentic_common.dynamodb.codec import decode_item, encode_item
from aithentic_common.dynamodb.service import GradingResultStore
from aithentic_common.grading import (
    EndpointInvoker,
    GradingBatchService,
    HttpTransport,
    ResultValidator,
    RetryPolicy,
)
from aithentic_common.sanitizer import START_MARKER


class GradingHandler(BaseHTTPRequestHandler):
    """Grades every assignment except 3, which always answers 502."""

    requests_by_id = {}

    def do_POST(self):
        length = int(self.headers["Content-Length"])
        payload = json.loads(self.rfile.read(length))
        assignment_id = payload["assignmentId"]
        self.requests_by_id.setdefault(assignment_id, []).append(payload)

        if assignment_id == "3":
            self._reply(502, "bad gateway")
            return

        result = {
            "analyticsId": payload["analyticsId"],
            "assignmentId": int(assignment_id),
            "gradeReceived": 0 if assignment_id == "2" else 88,
            "aiGeneratedAnalytics": {"isAIUsed": False, "percentageOfAIUsed": 0, "highlightedAreaOfAIUse": []},
            "plagarismAnalytics": {"isPlagarised": False, "plagarisedPercentage": 0, "plagarisedFrom": []},
            "gradeReasoning": "Well argued.",
            "remarks": "None.",
        }
        body = encode_item(result)
        if assignment_id == "4":
            body = [{"generated_text": json.dumps(body)}]
        self._reply(200, json.dumps(body))

    def _reply(self, status, body):
        data = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def grading_url():
    GradingHandler.requests_by_id = {}
    server = HTTPServer(("127.0.0.1", 0), GradingHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}/grade"
    server.shutdown()
    server.server_close()


@pytest.mark.integration
def test_grade_directory_over_http(grading_url, tmp_path):
    for name, text in {
        "1.txt": "First essay\fpage two",
        "2.txt": "Blank submission",
        "3.txt": "Essay the endpoint cannot grade",
        "4.txt": "Essay graded in the legacy format",
        "notes.txt": "not an assignment",
    }.items():
        (tmp_path / name).write_text(text, encoding="utf-8")

    store = MagicMock(spec=GradingResultStore)
    store.max_analytics_id.return_value = 6
    invoker = EndpointInvoker(
        HttpTransport(grading_url, timeout=5),
        retry_policy=RetryPolicy(base_delay=0),
        system_prompt=None,
    )
    service = GradingBatchService(invoker, store, validator=ResultValidator())

    response = service.run_directory(tmp_path)

    assert response["statusCode"] == 200
    assert response["analyticsId"] == 7
    outcomes = json.loads(response["body"])
    assert [(o["assignmentId"], o["status"]) for o in outcomes] == [
        ("1", "SUCCESS"),
        ("2", "SUCCESS"),
        ("3", "FAILED"),
        ("4", "SUCCESS"),
    ]
    assert "3 attempts" in outcomes[2]["error"]

    assert len(GradingHandler.requests_by_id["3"]) == 3
    first_payload = GradingHandler.requests_by_id["1"][0]
    assert first_payload["assignmentText"].startswith(START_MARKER)
    assert "\f" not in first_payload["assignmentText"]
    assert first_payload["analyticsId"] == 7

    saved = [decode_item(c.args[0]) for c in store.save_result.call_args_list]
    assert sorted(r["assignmentId"] for r in saved) == [1, 2, 4]
    assert {r["analyticsId"] for r in saved} == {7}
