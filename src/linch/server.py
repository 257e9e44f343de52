"""JSON-lines session server and command-line entrypoint."""

from __future__ import annotations

import argparse
import json
import os
import sys
from collections.abc import Callable, Sequence
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from linch.catalog import (
    Item,
    read_lines,
    scan_applications,
    scan_executables,
)
from linch.config import CliOverrides, LauncherConfig, load_effective_config
from linch.frecency import FrecencyStore, FrecencyStoreError
from linch.logging import (
    AuditEvent,
    JsonlAuditLogger,
    NullAuditLogger,
    sanitize_arguments,
    utc_timestamp,
)
from linch.methods import (
    MethodDispatchError,
    MethodRegistry,
    register_session_methods,
    register_status_methods,
)
from linch.navigation import LauncherSession, SessionClosedError
from linch.selection import LaunchError, SelectionCommitter, launch_item

DEFAULT_NAMESPACES = {"bin": "bin", "app": "app", "dmenu": ""}
STDIO_PATH = "-"


@dataclass(slots=True, frozen=True)
class Request:
    """Normalized incoming request."""

    request_id: str
    method: str
    params: dict[str, object]


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for launcher startup configuration."""
    parser = argparse.ArgumentParser(prog="linch")
    parser.add_argument("-p", "--prompt", required=False, default=None)
    parser.add_argument("-c", "--columns", type=int, required=False, default=None)
    parser.add_argument("-r", "--rows", type=int, required=False, default=None)
    parser.add_argument("-l", "--literal", action="store_true", default=None)
    parser.add_argument("-e", "--exit-unfocus", action="store_true", default=None)
    parser.add_argument("--cache", required=False, default=None)
    parser.add_argument("--clear-cache", action="store_true", default=False)
    parser.add_argument("--config-dir", required=False, default=None)
    parser.add_argument("--data-dir", required=False, default=None)
    parser.add_argument("--audit-enabled", choices=("true", "false"), required=False, default=None)
    parser.add_argument("--events", required=False, default=STDIO_PATH)
    parser.add_argument("--responses", required=False, default=STDIO_PATH)
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("bin", help="Launch a binary from PATH.")
    app = commands.add_parser("app", help="Launch a desktop application.")
    app.add_argument("--all", action="store_true", default=False)
    dmenu = commands.add_parser("dmenu", help="Choose one of the input lines.")
    dmenu.add_argument("--items", required=False, default=STDIO_PATH)
    return parser


class RequestRejected(Exception):
    """A line could not be turned into a dispatchable request."""

    def __init__(self, request_id: str, code: str, message: str, label: str) -> None:
        super().__init__(message)
        self.request_id = request_id
        self.code = code
        self.message = message
        self.label = label


def success_response(request_id: str, result: dict[str, object]) -> dict[str, object]:
    """Build the envelope for a handled event."""
    return {"request_id": request_id, "ok": True, "result": result, "warnings": []}


def error_response(request_id: str, code: str, message: str) -> dict[str, object]:
    """Build the envelope for a rejected or failed event."""
    response = success_response(request_id, {})
    response["ok"] = False
    response["error"] = {"code": code, "message": message}
    return response


class SessionServer:
    """JSON-lines front end for one launcher session.

    Each input line is one request ``{"id", "method", "params"}`` and yields
    exactly one response line. Protocol and handler failures become error
    envelopes; only a commit, cancel, or focus loss ends the session.
    """

    def __init__(
        self,
        session: LauncherSession,
        audit_logger: JsonlAuditLogger | NullAuditLogger,
        config: LauncherConfig,
    ) -> None:
        self._session = session
        self._audit_logger = audit_logger
        self._registry = MethodRegistry()
        register_session_methods(self._registry, session)
        register_status_methods(self._registry, session, config, audit_logger.read)
        self._fallback_request_counter = 0

    @property
    def session(self) -> LauncherSession:
        return self._session

    def serve(self, in_stream: TextIO, out_stream: TextIO) -> Item | None:
        """Answer requests until the session ends and return its selection.

        Running out of input cancels the session.
        """
        for raw_line in in_stream:
            line = raw_line.strip()
            if not line:
                continue
            response = self.handle_json_line(line)
            out_stream.write(json.dumps(response, sort_keys=True) + "\n")
            out_stream.flush()
            if self._session.done:
                return self._session.selection
        self._session.cancel()
        return None

    def handle_json_line(self, raw_line: str) -> dict[str, object]:
        try:
            payload = json.loads(raw_line)
        except json.JSONDecodeError:
            return self._reject(
                RequestRejected(
                    request_id=self.next_request_id(),
                    code="INVALID_JSON",
                    message="Request must be valid JSON.",
                    label="invalid_json",
                ),
                {"raw_line_length": len(raw_line)},
            )
        return self.handle_payload(payload)

    def handle_payload(self, payload: object) -> dict[str, object]:
        """Dispatch one decoded request and audit the outcome."""
        try:
            request = self.parse_request(payload)
        except RequestRejected as rejected:
            return self._reject(rejected, {})

        try:
            result = self._registry.dispatch(request.method, request.params)
        except MethodDispatchError as error:
            response = error_response(request.request_id, error.code, error.message)
        except SessionClosedError:
            response = error_response(
                request.request_id, "SESSION_CLOSED", "Session has already ended."
            )
        except FrecencyStoreError as error:
            response = error_response(request.request_id, "STORE_WRITE_FAILED", error.message)
        except Exception:
            response = error_response(
                request.request_id, "INTERNAL_ERROR", "Unhandled error while handling event."
            )
        else:
            response = success_response(request.request_id, result)

        self.log_request(request.request_id, request.method, request.params, response)
        return response

    def parse_request(self, payload: object) -> Request:
        """Normalize a decoded payload or raise :class:`RequestRejected`."""
        if not isinstance(payload, dict):
            raise RequestRejected(
                self.next_request_id(),
                "INVALID_REQUEST",
                "Request must be an object.",
                "invalid_request",
            )
        request_id = self.extract_request_id(payload.get("id"))
        method = payload.get("method")
        if not isinstance(method, str) or not method:
            raise RequestRejected(
                request_id,
                "INVALID_REQUEST",
                "Request method must be a non-empty string.",
                "invalid_request",
            )
        params = payload.get("params", {})
        if not isinstance(params, dict):
            raise RequestRejected(
                request_id,
                "INVALID_PARAMS",
                "Request params must be an object.",
                method,
            )
        return Request(request_id=request_id, method=method, params=params)

    def extract_request_id(self, raw_id: object) -> str:
        """Use the caller's string or integer id, else a fallback id."""
        if isinstance(raw_id, bool):
            return self.next_request_id()
        if isinstance(raw_id, int) or (isinstance(raw_id, str) and raw_id):
            return str(raw_id)
        return self.next_request_id()

    def next_request_id(self) -> str:
        self._fallback_request_counter += 1
        return f"req-{self._fallback_request_counter:06d}"

    def log_request(
        self,
        request_id: str,
        method: str,
        arguments: dict[str, object],
        response: dict[str, object],
    ) -> None:
        """Append one sanitized audit event for a response."""
        error = response.get("error")
        code = error.get("code") if isinstance(error, dict) else None
        self._audit_logger.append(
            AuditEvent(
                timestamp=utc_timestamp(),
                request_id=request_id,
                method=method,
                ok=response.get("ok") is True,
                error_code=code if isinstance(code, str) else None,
                metadata=sanitize_arguments(arguments),
            )
        )

    def _reject(
        self, rejected: RequestRejected, arguments: dict[str, object]
    ) -> dict[str, object]:
        response = error_response(rejected.request_id, rejected.code, rejected.message)
        self.log_request(rejected.request_id, rejected.label, arguments, response)
        return response


def build_audit_logger(config: LauncherConfig) -> JsonlAuditLogger | NullAuditLogger:
    """Return the JSONL audit logger, or a null logger when auditing is off."""
    if not config.audit_enabled:
        return NullAuditLogger()
    return JsonlAuditLogger(path=config.data_dir / "audit.jsonl")


def create_server(
    items: Sequence[Item],
    namespace: str = "",
    config_dir: str | None = None,
    data_dir: str | None = None,
    cache_dir: str | None = None,
    custom: bool | None = None,
    clear_cache: bool = False,
    cli_overrides: CliOverrides | None = None,
) -> SessionServer:
    """Create a configured session server over a built catalog."""
    overrides = cli_overrides or CliOverrides()
    if data_dir is not None or cache_dir is not None:
        overrides = CliOverrides(
            data_dir=Path(data_dir).resolve() if data_dir is not None else overrides.data_dir,
            cache_dir=Path(cache_dir).resolve() if cache_dir is not None else overrides.cache_dir,
            audit_enabled=overrides.audit_enabled,
            rows=overrides.rows,
            columns=overrides.columns,
            prompt=overrides.prompt,
            literal=overrides.literal,
            exit_unfocus=overrides.exit_unfocus,
        )
    config = load_effective_config(
        config_dir=Path(config_dir) if config_dir is not None else None,
        overrides=overrides,
    )
    store = FrecencyStore(cache_dir=config.cache_dir)
    committer = SelectionCommitter(
        store=store,
        namespace=namespace,
        custom=config.session.custom if custom is None else custom,
    )
    if clear_cache:
        committer.clear()
    session = LauncherSession(
        items=items,
        committer=committer,
        rows=config.layout.rows,
        max_columns=config.layout.columns,
        literal=config.session.literal,
        exit_unfocus=config.session.exit_unfocus,
        prompt=config.session.prompt,
    )
    return SessionServer(
        session=session, audit_logger=build_audit_logger(config), config=config
    )


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the launcher process."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.command == "dmenu" and args.items == STDIO_PATH and args.events == STDIO_PATH:
        parser.error("dmenu reads items from stdin; pass --events or --items as a file path.")

    audit_enabled: bool | None = None
    if args.audit_enabled == "true":
        audit_enabled = True
    if args.audit_enabled == "false":
        audit_enabled = False
    overrides = CliOverrides(
        data_dir=Path(args.data_dir).resolve() if args.data_dir is not None else None,
        audit_enabled=audit_enabled,
        rows=args.rows,
        columns=args.columns,
        prompt=args.prompt,
        literal=args.literal,
        exit_unfocus=args.exit_unfocus,
    )
    namespace = args.cache if args.cache is not None else DEFAULT_NAMESPACES[args.command]

    with ExitStack() as stack:
        items, custom = _build_catalog(args, stack)
        server = create_server(
            items=items,
            namespace=namespace,
            config_dir=args.config_dir,
            custom=custom,
            clear_cache=args.clear_cache,
            cli_overrides=overrides,
        )
        in_stream = _open_stream(stack, args.events, "r", sys.stdin)
        # stdout carries the dmenu selection.
        default_out = sys.stderr if args.command == "dmenu" else sys.stdout
        out_stream = _open_stream(stack, args.responses, "w", default_out)
        selection = server.serve(in_stream=in_stream, out_stream=out_stream)

    if selection is None:
        return 0
    try:
        launch_item(selection, out_stream=sys.stdout, on_attempt=_launch_auditor(server))
    except LaunchError as error:
        print(error, file=sys.stderr)
        return 1
    return 0


def _build_catalog(args: argparse.Namespace, stack: ExitStack) -> tuple[list[Item], bool | None]:
    if args.command == "bin":
        return list(scan_executables(os.environ.get("PATH", ""))), None
    if args.command == "app":
        return list(scan_applications(include_hidden=args.all)), None
    items_stream = _open_stream(stack, args.items, "r", sys.stdin)
    items: list[Item] = list(read_lines(items_stream))
    return items, True if not items else None


def _open_stream(stack: ExitStack, path: str, mode: str, default: TextIO) -> TextIO:
    if path == STDIO_PATH:
        return default
    return stack.enter_context(open(path, mode, encoding="utf-8"))


def _launch_auditor(server: SessionServer) -> Callable[[str, bool, str | None], None]:
    def on_attempt(strategy: str, ok: bool, error: str | None) -> None:
        response: dict[str, object] = {"ok": ok}
        if error is not None:
            response["error"] = {"code": "LAUNCH_FAILED", "message": error}
        server.log_request(
            request_id=server.next_request_id(),
            method="launch",
            arguments={"strategy": strategy, "ok": ok},
            response=response,
        )

    return on_attempt


if __name__ == "__main__":
    raise SystemExit(main())
