"""
Command-line front end for the distirc terminal client

Core address and credentials come from DISTIRC_HOST, DISTIRC_PORT,
DISTIRC_USER and DISTIRC_PASS. This is a plain line-oriented front end;
every input line is sent to the current buffer's target.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from pydantic import ValidationError

from .config import CoreConfig
from .errors import log_error
from .logging_config import LoggerConfigurator
from .logs import install_status_sink, logger
from .model import BufferKind, BufferRegistry, BufferView, BufKey
from .session import SessionWorker
from .ui import MainBar


class LineConsole:
    """Prints new lines of the current buffer and forwards user input."""

    def __init__(
        self,
        registry: BufferRegistry,
        worker: SessionWorker,
        out: TextIO = sys.stdout,
    ) -> None:
        self.registry = registry
        self.worker = worker
        self.out = out
        self.view: BufferView = registry.status()[0]
        self.bar = MainBar()
        self._seen: dict[BufKey, set[int]] = {}

    def flush(self) -> None:
        seen = self._seen.setdefault(self.view.key, set())
        for line in self.view.snapshot():
            if id(line) in seen:
                continue
            seen.add(id(line))
            stamp = line.time.astimezone().strftime("%H:%M")
            self.out.write(f"{stamp} {line.text}\n")
        self.bar.update(self.view)
        self.out.write(self.bar.render(60).rstrip() + "\n")
        self.out.flush()

    def handle_input(self, text: str) -> bool:
        """Process one input line; False means the user asked to quit."""
        text = text.rstrip("\n")
        if not text:
            return True
        if text == "/quit":
            return False
        if text == "/reconnect":
            self.worker.reconnect()
        elif text == "/buffers":
            names = ", ".join(key.display_name() for key in self.registry.keys())
            self.out.write(f"buffers: {names}\n")
        elif text.startswith("/buffer "):
            self._switch(text.split(" ", 1)[1].strip())
        else:
            target = self.view.key
            if target.kind is BufferKind.STATUS:
                target = BufKey.server()
            self.worker.send_text(target, text)
        return True

    def _switch(self, name: str) -> None:
        view = self.registry.find(name)
        if view is None:
            self.out.write(f"no such buffer: {name}\n")
            return
        self.view = view

    def run(self, stdin: TextIO = sys.stdin) -> None:
        while True:
            self.worker.raise_if_failed()
            self.flush()
            line = stdin.readline()
            if not line or not self.handle_input(line):
                return


def main(argv: list[str]) -> int:
    if "--headless" in argv:
        LoggerConfigurator().configure()

    try:
        config = CoreConfig.from_env()
    except ValidationError as e:
        logger.log_event(
            "app",
            "config_invalid",
            level=logging.ERROR,
            human=f"Invalid core configuration: {e}",
        )
        return 2

    if "--health-check" in argv:
        logger.log_event("app", "health_check", human=f"Configuration OK for {config.address}")
        return 0

    registry = BufferRegistry()
    _, status = registry.status()
    install_status_sink(status)
    logger.log_event("app", "sink_installed", level=logging.DEBUG)
    logger.log_event("app", "start")

    worker = SessionWorker(config, registry)
    worker.start()
    console = LineConsole(registry, worker)
    try:
        console.run()
    except KeyboardInterrupt:
        logger.log_event(
            "app", "interrupted", level=logging.WARNING, human="Interrupted by user"
        )
    finally:
        worker.close_commands()
        worker.stop()
        logger.log_event("app", "stop")
    worker.raise_if_failed()
    return 0


def run() -> None:
    try:
        sys.exit(main(sys.argv[1:]))
    except Exception as e:
        log_error("Top-level error", e)
        sys.stderr.write(f"Critical error occurred: {e}\n")
        sys.exit(1)
