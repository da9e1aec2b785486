"""Command/response surface over one traversal engine.

Every command gets exactly one response dict and nothing raises across this
boundary: failures are logged and reported as ``{"status": "error"}``. Push
notifications do not pass through here; they travel over the engine's status
channel.
"""

import asyncio
import logging
from typing import Any

from pydantic import ValidationError

from ..exceptions import ScraperError
from ..models import Command, ExportFormat
from ..scrapers.traversal import TraversalEngine
from ..services.exporter import RecordExporter

logger = logging.getLogger(__name__)

Response = dict[str, Any]


class ScraperController:
    """Dispatches operator commands to the engine and the exporter."""

    def __init__(self, engine: TraversalEngine, exporter: RecordExporter) -> None:
        self.engine = engine
        self.exporter = exporter
        self._task: asyncio.Task | None = None

    async def handle(self, command: Command | dict[str, Any]) -> Response:
        """Handle one command.

        Args:
            command: Command model or its wire form, e.g. ``{"action": "start"}``.

        Returns:
            Response dict, ``{"status": "unknown_action"}`` for anything unknown.
        """
        try:
            if not isinstance(command, Command):
                command = Command.model_validate(command)
        except ValidationError as e:
            logger.warning(f"Malformed command {command!r}: {e}")
            return {"status": "unknown_action"}

        handlers = {
            "start": self._start,
            "stop": self._stop,
            "reset": self._reset,
            "getStatus": self._get_status,
            "export": self._export,
        }
        handler = handlers.get(command.action)
        if handler is None:
            logger.info(f"Unknown action: {command.action}")
            return {"status": "unknown_action"}

        try:
            return await handler(command)
        except Exception as e:
            logger.error(f"Command '{command.action}' failed: {e}")
            return {"status": "error", "message": str(e)}

    async def wait_until_idle(self) -> None:
        """Wait for the background run started by ``start`` to finish."""
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)

    async def _start(self, command: Command) -> Response:
        if self.engine.is_running or (self._task is not None and not self._task.done()):
            return {"status": "already_running"}

        self._task = asyncio.create_task(self.engine.run())
        # Let the run pass its feed check before answering
        await asyncio.sleep(0)
        return {"status": "started"}

    async def _stop(self, command: Command) -> Response:
        await self.engine.stop()
        return {"status": "stopped", "count": len(self.engine.store)}

    async def _reset(self, command: Command) -> Response:
        if not self.engine.reset():
            return {"status": "already_running", "count": len(self.engine.store)}
        return {"status": "reset", "count": 0}

    async def _get_status(self, command: Command) -> Response:
        engine = self.engine
        return {
            "isRunning": engine.is_running,
            "count": len(engine.store),
            "state": engine.state.value,
            "stopReason": engine.stop_reason.value if engine.stop_reason else None,
        }

    async def _export(self, command: Command) -> Response:
        records = self.engine.store.records
        if not records:
            return {"status": "no_data"}

        fmt = command.format or ExportFormat.CSV
        try:
            path = self.exporter.write(records, fmt)
        except ScraperError as e:
            logger.error(f"Export failed: {e}")
            return {"status": "error", "message": str(e)}

        return {"status": "exported", "format": fmt.value, "path": str(path), "count": len(records)}
