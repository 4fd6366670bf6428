"""Application wiring and HTTP server lifecycle."""

from __future__ import annotations

import socket
import threading
from http.server import ThreadingHTTPServer
from typing import Optional

from .autocorrect import SpeciesCorrector
from .config import NatureConfig, get_config
from .database import NatureDatabase
from .geocoding import ZipCodeGeocoder
from .http import NatureController
from .http_handler import NatureHTTPHandler
from .logging import module_logger, setup_logging
from .observations import ObservationClient
from .query_parser import QueryParser
from .services import NatureService
from .species_lookup import SpeciesLookup
from .tagging import NltkTagger, Tagger

logger = module_logger(service='nature', component='server')


class NatureApplication:
    """Everything one server process shares between request threads."""

    def __init__(
        self,
        config: Optional[NatureConfig] = None,
        *,
        database: Optional[NatureDatabase] = None,
        observations: Optional[ObservationClient] = None,
        tagger: Optional[Tagger] = None,
        corrector: Optional[SpeciesCorrector] = None,
        geocoder: Optional[ZipCodeGeocoder] = None,
        lookup: Optional[SpeciesLookup] = None,
    ) -> None:
        self.config = config or get_config()
        self.database = database or NatureDatabase(self.config.database_path)
        self.observations = observations or ObservationClient(self.config)
        if corrector is None and self.config.autocorrect_enabled:
            corrector = SpeciesCorrector.from_data_file(cutoff=float(self.config.get('autocorrect_cutoff', 0.8)))
        self.parser = QueryParser(tagger or NltkTagger(), corrector)
        self.service = NatureService(
            self.config,
            self.database,
            self.observations,
            self.parser,
            geocoder=geocoder or ZipCodeGeocoder(self.config),
            lookup=lookup or SpeciesLookup.from_data_file(),
        )
        self.controller = NatureController(self.service)

    def close(self) -> None:
        self.observations.close()
        self.database.close()


class NatureServer:
    """Run the HTTP server on a background thread."""

    def __init__(self, app: NatureApplication, host: Optional[str] = None, port: Optional[int] = None) -> None:
        self._app = app
        self._host = host or app.config.server_host
        self._port = app.config.server_port if port is None else port
        self._server: Optional[ThreadingHTTPServer] = None
        self._server_thread: Optional[threading.Thread] = None
        self._server_ready = threading.Event()

    @property
    def port(self) -> int:
        if self._server is not None:
            return int(self._server.server_address[1])
        return self._port

    @property
    def url(self) -> str:
        return f"http://{self._host}:{self.port}"

    def start(self) -> None:
        """Start the HTTP server and wait until it is serving."""
        handler_class = NatureHTTPHandler.create_handler_class(self._app)
        self._server = ThreadingHTTPServer((self._host, self._port), handler_class)
        self._server.socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._server.daemon_threads = True

        self._server_thread = threading.Thread(
            target=self._run_server,
            name=f"NeighborhoodNature-HTTP-{self.port}",
            daemon=True,
        )
        self._server_thread.start()

        timeout = float(self._app.config.get('server_ready_timeout', 5.0))
        if self._server_ready.wait(timeout=timeout):
            logger.info(f"Neighborhood Nature HTTP server started on {self.url}")
        else:
            logger.warning("Neighborhood Nature HTTP server start timeout")

    def _run_server(self) -> None:
        try:
            self._server_ready.set()
            self._server.serve_forever()
        except Exception as e:
            logger.error(f"Neighborhood Nature HTTP server error: {e}")
        finally:
            if self._app.config.debug_mode:
                logger.info("Neighborhood Nature HTTP server thread stopped")

    def serve_forever(self) -> None:
        """Start and block until interrupted."""
        self.start()
        try:
            while self._server_thread is not None and self._server_thread.is_alive():
                self._server_thread.join(timeout=0.5)
        except KeyboardInterrupt:
            logger.info("Interrupted, shutting down")
        finally:
            self.shutdown()

    def shutdown(self, timeout: float = 5.0) -> None:
        """Shutdown the HTTP server gracefully."""
        if self._server is None:
            return
        try:
            self._server.shutdown()
            if self._server_thread and self._server_thread.is_alive():
                self._server_thread.join(timeout=timeout)
                if self._server_thread.is_alive():
                    logger.warning("HTTP server thread did not terminate within timeout")
        finally:
            self._server.server_close()
            self._server = None
            logger.info("Neighborhood Nature HTTP server stopped")


def create_server(config: Optional[NatureConfig] = None, **overrides) -> NatureServer:
    """Configure logging, build the application and return an unstarted server."""
    config = config or get_config()
    setup_logging('nature', level='DEBUG' if config.debug_mode else None, json_format=config.get('json_logging') or None)
    return NatureServer(NatureApplication(config, **overrides))


__all__ = ['NatureApplication', 'NatureServer', 'create_server']
