"""The stiff application.

Everything is built in the constructor: route map, mime map and file
map are resolved once from the configuration and the public directory,
then shared read-only by every request for the life of the process.
"""

import logging
from pathlib import Path

from stiff._internal.asgi import Receive, Scope, Send
from stiff.config import ServerConfig
from stiff.files.filemap import FileMap, build_file_map
from stiff.files.mimemap import MimeMap
from stiff.routing.route_map import RouteMap
from stiff.server.handler import FileHandler, handle_request

logger = logging.getLogger("stiff.server")


class FileServer:
    """ASGI application serving one directory of pre-built files.

    Usage::

        from stiff import FileServer, load_config

        app = FileServer("public", load_config("stiff.json"))

    Raises (from the constructor):
        ConfigurationError: If a route or mimetype entry is invalid.
        BuildError: If the directory cannot be scanned.
    """

    __slots__ = ("_handler", "config", "directory", "file_map", "mime_map", "route_map")

    def __init__(self, directory: str | Path = "public", config: ServerConfig | None = None) -> None:
        self.directory = Path(directory)
        self.config = config
        self.route_map = RouteMap.build(config)
        self.mime_map = MimeMap().with_overrides(config.mimetypes if config is not None else {})
        self.file_map: FileMap = build_file_map(self.directory, self.route_map, self.mime_map)
        self._handler = FileHandler(self.route_map, self.file_map)

    def run(
        self,
        host: str = "0.0.0.0",
        port: int = 1717,
        *,
        workers: int = 1,
        log_level: str = "info",
    ) -> None:
        """Start serving with pounce. Blocks until shutdown."""
        from stiff.server.production import run_server

        logger.info("Listening on %s:%d...", host, port)
        run_server(self, host=host, port=port, workers=workers, log_level=log_level)

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        if scope["type"] != "http":
            return

        await handle_request(scope, send, handler=self._handler)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Acknowledge the lifespan protocol.

        Startup work already happened in the constructor, so there is
        nothing to run; the maps need no teardown either.
        """
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return
