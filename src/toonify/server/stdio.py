"""stdio server mode: JSON line-delimited protocol over stdin/stdout."""

from __future__ import annotations

import json
import sys
from typing import IO, Any

from pydantic import ValidationError

from toonify.contracts.common import ToonifyError
from toonify.engine.cost import calculate_token_savings
from toonify.engine.eligibility import analyze_eligibility
from toonify.engine.processor import ToonProcessor


class StdioServer:
    """Simple JSON-RPC-like server over stdin/stdout around one processor."""

    def __init__(self, processor: ToonProcessor | None = None) -> None:
        self.processor = processor or ToonProcessor()

    def handle_request(self, request: dict[str, Any]) -> dict[str, Any]:
        req_id = request.get("id", "")
        command = request.get("command", "")
        args = request.get("args", {}) or {}
        if not isinstance(args, dict):
            return {"id": req_id, "ok": False, "error": "args must be a JSON object"}

        try:
            if command == "analyze":
                report = analyze_eligibility(
                    args.get("data"), self.processor.get_config().eligibility
                )
                return {"id": req_id, "ok": True, "result": report.model_dump()}

            elif command == "encode":
                value = args.get("data")
                toon_text = self.processor.codec.encode(value)
                metrics = calculate_token_savings(value, self.processor.codec)
                return {
                    "id": req_id,
                    "ok": True,
                    "result": {"toon": toon_text, "metrics": metrics.model_dump()},
                }

            elif command == "decode":
                value = self.processor.codec.decode(args.get("content", ""))
                return {"id": req_id, "ok": True, "result": value}

            elif command == "preprocess":
                processed, eligibility = self.processor.pre_process(args)
                return {
                    "id": req_id,
                    "ok": True,
                    "result": {
                        "request": processed.model_dump(mode="json"),
                        "eligibility": eligibility.model_dump(),
                    },
                }

            elif command == "postprocess":
                result = self.processor.post_process(args.get("content", ""))
                return {"id": req_id, "ok": True, "result": result.model_dump(mode="json")}

            elif command == "config.get":
                return {"id": req_id, "ok": True, "result": self.processor.get_config().model_dump()}

            elif command == "config.update":
                config = self.processor.update_config(args)
                return {"id": req_id, "ok": True, "result": config.model_dump()}

            else:
                return {"id": req_id, "ok": False, "error": f"Unknown command: {command}"}

        except (ToonifyError, ValidationError) as e:
            return {"id": req_id, "ok": False, "error": str(e)}
        except Exception as e:
            return {"id": req_id, "ok": False, "error": f"{type(e).__name__}: {e}"}

    def run(self, stdin: IO[str] | None = None, stdout: IO[str] | None = None) -> None:
        """Main server loop: read JSON lines from stdin, write responses to stdout."""
        stdin = stdin or sys.stdin
        stdout = stdout or sys.stdout
        for line in stdin:
            line = line.strip()
            if not line:
                continue
            try:
                request = json.loads(line)
            except (json.JSONDecodeError, RecursionError) as e:
                response = {"ok": False, "error": f"Invalid JSON: {e}"}
                stdout.write(json.dumps(response) + "\n")
                stdout.flush()
                continue

            if not isinstance(request, dict):
                response = {"ok": False, "error": "Request must be a JSON object"}
            else:
                response = self.handle_request(request)
            stdout.write(json.dumps(response, default=str) + "\n")
            stdout.flush()
