"""Reconnect session: drives scan and apply requests from the interface.

A session owns the detached-style map of the most recent scan. Each scan
replaces it, so fixes are only accepted for ids from the latest scan.
"""

import asyncio
import json
import sys
from collections.abc import AsyncIterable, Callable
from typing import Any, TextIO

from .config import ReconnectConfig
from .document import DocumentAccess
from .errors import EmptySelectionError, NodeLimitExceededError
from .library import LibraryExtractor, TokenStore
from .matcher import find_matches
from .models import DetachedStyle
from .protocol import (
    APPLY_COMPLETE,
    SCAN_COMPLETE,
    ApplyFixesRequest,
    CancelRequest,
    ScanRequest,
    error_response,
    parse_request,
)
from .reconnect_logging import LogCategory, get_category_logger
from .resolver import FixResolver
from .scanner import DocumentScanner

logger = get_category_logger(LogCategory.SESSION)


class ReconnectSession:
    """One interactive reconnect session against a document."""

    def __init__(
        self,
        document: DocumentAccess,
        token_store: TokenStore,
        config: ReconnectConfig | None = None,
    ):
        self.document = document
        self.token_store = token_store
        self.config = config or ReconnectConfig()
        self._detached_styles: dict[str, DetachedStyle] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def detached_styles(self) -> dict[str, DetachedStyle]:
        """Detached styles of the most recent scan, by id."""
        return dict(self._detached_styles)

    def cancel(self) -> None:
        """Close the session.

        An in-flight request notices between phases and drops its response;
        every later message is ignored.
        """
        if not self._closed:
            logger.info("Session cancelled")
        self._closed = True

    async def handle_message(self, message: Any) -> dict[str, Any] | None:
        """Handle one inbound message.

        Returns:
            The response to send back, or None when there is nothing to send
            (cancel, unknown or invalid messages, closed session).
        """
        if self._closed:
            logger.debug("Ignoring message on a closed session")
            return None

        request = parse_request(message)
        if request is None:
            return None

        if isinstance(request, CancelRequest):
            self.cancel()
            return None

        if isinstance(request, ScanRequest):
            try:
                return await self.handle_scan(request)
            except Exception as e:
                logger.error(f"Error scanning for detached styles: {e}")
                return error_response(
                    SCAN_COMPLETE, f"Error scanning for detached styles: {e}"
                )

        try:
            return await self.handle_apply_fixes(request)
        except Exception as e:
            logger.error(f"Error applying fixes: {e}")
            return error_response(APPLY_COMPLETE, f"Error applying fixes: {e}")

    async def handle_scan(self, request: ScanRequest) -> dict[str, Any] | None:
        """Scan, load libraries, match; one response for the whole pipeline."""
        self._detached_styles = {}

        scope = None
        if request.use_selection:
            scope = await self.document.get_selection()
            if not scope:
                error = EmptySelectionError()
                logger.info(error.message)
                return error_response(SCAN_COMPLETE, error.message)

        scanner = DocumentScanner(self.document, self.config.scan)
        result = await scanner.scan(scope)
        if self._closed:
            return None

        if result.has_exceeded_limit:
            error = NodeLimitExceededError(result.node_count, self.config.scan.node_limit)
            return error_response(SCAN_COMPLETE, error.message)

        styles = result.detached_styles.all()
        self._detached_styles = {style.id: style for style in styles}

        if not styles:
            return {"type": SCAN_COMPLETE, "detachedStyles": [], "matchResults": []}

        loaded = await LibraryExtractor(self.token_store).get_libraries()
        if self._closed:
            return None
        if not loaded.ok:
            return error_response(SCAN_COMPLETE, loaded.error_message)

        match_results = find_matches(styles, loaded.libraries)
        return {
            "type": SCAN_COMPLETE,
            "detachedStyles": [style.to_dict() for style in styles],
            "matchResults": [match.to_dict() for match in match_results],
        }

    async def handle_apply_fixes(
        self, request: ApplyFixesRequest
    ) -> dict[str, Any] | None:
        """Apply fixes against the most recent scan."""
        if self._closed:
            return None

        result = await FixResolver(self.document).apply_fixes(
            request.to_fixes(), self._detached_styles
        )
        response: dict[str, Any] = {
            "type": APPLY_COMPLETE,
            "appliedCount": result.applied_count,
            "errorCount": result.error_count,
        }
        if not result.success:
            response["errorMessage"] = result.message
        return response


async def run_session(
    session: ReconnectSession,
    lines: AsyncIterable[str],
    send: Callable[[dict[str, Any]], None],
) -> int:
    """Feed JSON lines into a session until input ends or the session closes.

    Returns:
        Number of responses sent.
    """
    sent = 0
    async for line in lines:
        line = line.strip()
        if not line:
            continue
        try:
            message = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring malformed message: {e}")
            continue

        response = await session.handle_message(message)
        if response is not None:
            send(response)
            sent += 1
        if session.closed:
            break
    return sent


async def _read_lines(stream: TextIO) -> AsyncIterable[str]:
    loop = asyncio.get_running_loop()
    while True:
        line = await loop.run_in_executor(None, stream.readline)
        if not line:
            return
        yield line


async def run_stdio_session(
    session: ReconnectSession,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    """Serve the message protocol over JSON lines on stdin/stdout."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    def send(response: dict[str, Any]) -> None:
        stdout.write(json.dumps(response) + "\n")
        stdout.flush()

    logger.info("Session started")
    return await run_session(session, _read_lines(stdin), send)
