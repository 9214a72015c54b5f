"""Typer CLI application: analyze, encode, decode and pre-process payloads."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated, Any, Optional

import orjson
import typer
from pydantic import ValidationError

import toonify
from toonify.config import load_config, load_config_from_dir
from toonify.contracts.analysis import EligibilityConfig, ToonConfig
from toonify.contracts.common import ConfigError, WarningDetail
from toonify.contracts.pipeline import PipelineRequest
from toonify.engine.cost import calculate_token_savings
from toonify.engine.dispatcher import (
    error_envelope,
    exit_code_for,
    print_response,
    success_envelope,
)
from toonify.engine.eligibility import analyze_eligibility
from toonify.engine.processor import ToonProcessor
from toonify.io.fileops import atomic_write, read_text_safe
from toonify.observe.events import EventEmitter, Timer

# ---------------------------------------------------------------------------
# App & subcommand groups
# ---------------------------------------------------------------------------

_MAIN_HELP = """\
Decide when TOON (Token-Oriented Object Notation) beats JSON for LLM payloads.

**Recommended workflow:**  analyze → preprocess → (call your model) → decode

1. `toonify analyze --file data.json`: tabularity, depth, uniformity and a verdict
2. `toonify preprocess --request request.json`: encode `data` as TOON when eligible
3. `toonify decode --file reply.txt`: decode a model reply (TOON, falling back to JSON)

**Every command** returns a JSON `ResponseEnvelope`:
`{"ok": bool, "command": "...", "result": {...}, "errors": [...], "warnings": [...], "metrics": {"duration_ms": N}}`

Input is read from `--data`/`--content`, `--file`, or stdin, in that order.
Thresholds come from `--config`, else `./toonify.yaml`, else defaults (60 / 4 / 0.8),
and can be overridden per call with `--min-tabular`, `--max-depth`, `--min-uniformity`.

**Exit codes:** 0=success, 10=validation, 50=io, 90=internal
"""

_CONFIG_EPILOG = """\
**Examples:**

`toonify config show`: effective thresholds

`toonify config show --config toonify.yaml --max-depth 2`
"""

app = typer.Typer(
    name="toonify",
    help=_MAIN_HELP,
    rich_markup_mode="markdown",
    no_args_is_help=True,
)

config_app = typer.Typer(
    name="config", help="Inspect the effective configuration.",
    epilog=_CONFIG_EPILOG,
    rich_markup_mode="markdown",
)

app.add_typer(config_app)


# Type aliases for common options
DataOpt = Annotated[Optional[str], typer.Option("--data", "-d", help="Inline JSON value")]
FileOpt = Annotated[Optional[str], typer.Option("--file", "-f", help="Path to a JSON file (default: stdin)")]
ConfigOpt = Annotated[Optional[str], typer.Option("--config", "-c", help="Path to a toonify.yaml config file")]
MinTabularOpt = Annotated[Optional[float], typer.Option("--min-tabular", help="Minimum tabular percent (0-100)")]
MaxDepthOpt = Annotated[Optional[int], typer.Option("--max-depth", help="Maximum nesting depth")]
MinUniformityOpt = Annotated[Optional[float], typer.Option("--min-uniformity", help="Minimum uniformity score (0-1)")]
EventsOpt = Annotated[bool, typer.Option("--events", help="Emit NDJSON lifecycle events on stderr")]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _emit(envelope, code=None):
    print_response(envelope)
    raise typer.Exit(code if code is not None else exit_code_for(envelope))


def _read_input(cmd: str, inline: str | None, file: str | None) -> str:
    """Return inline text, file contents, or stdin; emit an error envelope on failure."""
    if inline is not None:
        return inline
    if file:
        try:
            return read_text_safe(file)
        except FileNotFoundError:
            _emit(error_envelope(cmd, "ERR_INPUT_NOT_FOUND", f"File not found: {file}"))
        except OSError as e:
            _emit(error_envelope(cmd, "ERR_IO", f"Cannot read {file}: {e}"))
    return sys.stdin.read()


def _read_json(cmd: str, inline: str | None, file: str | None) -> Any:
    text = _read_input(cmd, inline, file)
    try:
        return orjson.loads(text)
    except orjson.JSONDecodeError as e:
        _emit(error_envelope(cmd, "ERR_INVALID_JSON", f"Input is not valid JSON: {e}"))


def _resolve_config(
    cmd: str,
    config_path: str | None,
    min_tabular: float | None = None,
    max_depth: int | None = None,
    min_uniformity: float | None = None,
) -> ToonConfig:
    """Load the config file (explicit, else ./toonify.yaml) and apply CLI overrides."""
    try:
        if config_path:
            config = load_config(config_path)
        else:
            config = load_config_from_dir(Path.cwd()) or ToonConfig()

        overrides = {
            key: value
            for key, value in (
                ("min_tabular_percent", min_tabular),
                ("max_nested_depth", max_depth),
                ("min_uniformity_score", min_uniformity),
            )
            if value is not None
        }
        if overrides:
            eligibility = EligibilityConfig.model_validate(
                {**config.eligibility.model_dump(), **overrides}
            )
            config = config.model_copy(update={"eligibility": eligibility})
    except (ConfigError, ValidationError) as e:
        _emit(error_envelope(cmd, "ERR_CONFIG_INVALID", str(e)))
    return config


# ---------------------------------------------------------------------------
# toonify version
# ---------------------------------------------------------------------------
@app.command()
def version():
    """Print the toonify version.

    Example: `toonify version`
    """
    env = success_envelope("version", {"version": toonify.__version__})
    _emit(env)


# ---------------------------------------------------------------------------
# toonify analyze
# ---------------------------------------------------------------------------
@app.command()
def analyze(
    data: DataOpt = None,
    file: FileOpt = None,
    config: ConfigOpt = None,
    min_tabular: MinTabularOpt = None,
    max_depth: MaxDepthOpt = None,
    min_uniformity: MinUniformityOpt = None,
):
    """Report how tabular a JSON value is and whether TOON is worthwhile.

    Example: `toonify analyze --data '{"users":[{"id":1},{"id":2}]}'`
    """
    with Timer() as t:
        value = _read_json("analyze", data, file)
        cfg = _resolve_config("analyze", config, min_tabular, max_depth, min_uniformity)
        report = analyze_eligibility(value, cfg.eligibility)
    env = success_envelope("analyze", report.model_dump(), duration_ms=t.elapsed_ms)
    _emit(env)


# ---------------------------------------------------------------------------
# toonify encode
# ---------------------------------------------------------------------------
@app.command()
def encode(
    data: DataOpt = None,
    file: FileOpt = None,
    raw: Annotated[bool, typer.Option("--raw", help="Print only the TOON text; savings go to stderr")] = False,
    out: Annotated[Optional[str], typer.Option("--out", "-o", help="Write the TOON text to this file")] = None,
    config: ConfigOpt = None,
):
    """Encode a JSON value as TOON, regardless of eligibility.

    Example: `cat users.json | toonify encode --raw`
    """
    with Timer() as t:
        value = _read_json("encode", data, file)
        cfg = _resolve_config("encode", config)
        processor = ToonProcessor(cfg)
        toon_text = processor.codec.encode(value)
        metrics = calculate_token_savings(value, processor.codec)
        if out:
            atomic_write(out, toon_text.encode("utf-8"))

    if raw:
        sys.stdout.write(toon_text + "\n")
        sys.stderr.write(f"Token savings: {metrics.percent_saved:.1f}%\n")
        raise typer.Exit(0)

    result = {
        "toon": toon_text,
        "metrics": metrics.model_dump(),
        "eligibility": analyze_eligibility(value, cfg.eligibility).model_dump(),
    }
    if out:
        result["written_to"] = out
    env = success_envelope("encode", result, duration_ms=t.elapsed_ms)
    _emit(env)


# ---------------------------------------------------------------------------
# toonify decode
# ---------------------------------------------------------------------------
@app.command()
def decode(
    content: Annotated[Optional[str], typer.Option("--content", help="Inline model reply text")] = None,
    file: Annotated[Optional[str], typer.Option("--file", "-f", help="Path to a file holding the reply (default: stdin)")] = None,
    events: EventsOpt = False,
):
    """Decode a model reply: TOON first, then JSON.

    Replies that look like neither (plain prose) fail with exit code 10.

    Example: `toonify decode --file reply.txt`
    """
    with Timer() as t:
        text = _read_input("decode", content, file)
        processor = ToonProcessor(emitter=EventEmitter(enabled=events))
        result = processor.post_process(text)

    if not result.success:
        env = error_envelope(
            "decode",
            "ERR_DECODE_FAILED",
            result.error or "Reply is not in a recognized structured format",
            result=result.model_dump(mode="json"),
            duration_ms=t.elapsed_ms,
        )
        _emit(env)
    warnings = [WarningDetail(code="WARN_JSON_FALLBACK", message=result.error)] if result.error else []
    env = success_envelope(
        "decode", result.model_dump(mode="json"), warnings=warnings, duration_ms=t.elapsed_ms
    )
    _emit(env)


# ---------------------------------------------------------------------------
# toonify preprocess
# ---------------------------------------------------------------------------
@app.command()
def preprocess(
    request: Annotated[Optional[str], typer.Option("--request", "-r", help="Path to a request JSON file (default: stdin)")] = None,
    data: Annotated[Optional[str], typer.Option("--data", "-d", help="Inline request JSON")] = None,
    config: ConfigOpt = None,
    min_tabular: MinTabularOpt = None,
    max_depth: MaxDepthOpt = None,
    min_uniformity: MinUniformityOpt = None,
    events: EventsOpt = False,
):
    """Encode a request's `data` as TOON when it is eligible.

    The request is `{"system_prompt": "...", "user_message": "...", "data": ...}`.

    Example: `toonify preprocess --request request.json`
    """
    with Timer() as t:
        body = _read_json("preprocess", data, request)
        if not isinstance(body, dict):
            _emit(error_envelope("preprocess", "ERR_INVALID_REQUEST", "Request must be a JSON object"))
        try:
            pipeline_request = PipelineRequest.model_validate(body)
        except ValidationError as e:
            _emit(error_envelope("preprocess", "ERR_INVALID_REQUEST", str(e)))
        cfg = _resolve_config("preprocess", config, min_tabular, max_depth, min_uniformity)
        processor = ToonProcessor(cfg, emitter=EventEmitter(enabled=events))
        processed, eligibility = processor.pre_process(pipeline_request)

    result = {
        "request": processed.model_dump(mode="json"),
        "eligibility": eligibility.model_dump(),
    }
    env = success_envelope("preprocess", result, duration_ms=t.elapsed_ms)
    _emit(env)


# ---------------------------------------------------------------------------
# toonify config show
# ---------------------------------------------------------------------------
@config_app.command("show")
def config_show(
    config: ConfigOpt = None,
    min_tabular: MinTabularOpt = None,
    max_depth: MaxDepthOpt = None,
    min_uniformity: MinUniformityOpt = None,
):
    """Print the effective configuration after file loading and overrides.

    Example: `toonify config show`
    """
    cfg = _resolve_config("config.show", config, min_tabular, max_depth, min_uniformity)
    env = success_envelope("config.show", cfg.model_dump())
    _emit(env)


# ---------------------------------------------------------------------------
# toonify serve --stdio
# ---------------------------------------------------------------------------
@app.command("serve")
def serve_cmd(
    stdio: Annotated[bool, typer.Option("--stdio", help="Use stdin/stdout for JSON request/response (for agent tool integration)")] = True,
    config: ConfigOpt = None,
    events: EventsOpt = False,
):
    """Start a stdio server holding one long-lived processor.

    Reads JSON commands from stdin and writes JSON responses to stdout.
    Each line is a JSON object: `{"id": "1", "command": "analyze", "args": {"data": {...}}}`

    Example: `toonify serve --stdio`
    """
    from toonify.server.stdio import StdioServer

    cfg = _resolve_config("serve", config)
    server = StdioServer(ToonProcessor(cfg, emitter=EventEmitter(enabled=events)))
    server.run()


# ---------------------------------------------------------------------------
# Entrypoint (for `python -m toonify`)
# ---------------------------------------------------------------------------
def main() -> None:
    try:
        app()
    except SystemExit:
        raise
    except Exception as exc:
        # Unhandled exceptions still produce a JSON envelope.
        env = error_envelope(
            "unknown",
            "ERR_INTERNAL",
            str(exc),
        )
        print_response(env)
        raise SystemExit(90) from exc


if __name__ == "__main__":
    main()
