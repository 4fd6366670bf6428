"""
HTTP request handler bridging Neighborhood Nature routes to the controller.

Routing follows ``transport.contract``: each ``(path, verb)`` pair names one
controller operation. Responses are dictionaries; a few reserved keys change
how they are written:

- ``_redirect``: send ``303 See Other`` to the given location
- ``_raw_text`` / ``_content_type``: send the text verbatim
- ``success: False`` with ``error_code``: JSON error with the mapped status
"""

from __future__ import annotations

import json
import secrets
import time
from http.cookies import CookieError, SimpleCookie
from http.server import BaseHTTPRequestHandler
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import parse_qs, urlparse

from .errors import MethodNotAllowed, NatureError, NotFoundError, ValidationFailure, error_response, status_for
from .logging import module_logger
from .transport import HTTP_OPERATIONS

logger = module_logger(service='nature', component='http_handler')

SESSION_COOKIE = 'NNSESSIONID'
STATIC_DIR = Path(__file__).resolve().parent / 'static'
STATIC_PAGES = {
    '': 'index.html',
    'index.html': 'index.html',
    'create-route.html': 'create-route.html',
    'generated-routes.html': 'generated-routes.html',
    'error-page.html': 'error-page.html',
}
STATIC_ASSETS = {
    'style.css': 'text/css; charset=utf-8',
    'app.js': 'application/javascript; charset=utf-8',
}
FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded'
MAX_BODY_BYTES = 1024 * 1024


def _normalize_params(params: Dict[str, Any]) -> Dict[str, Any]:
    normalized: Dict[str, Any] = {}
    for key, value in (params or {}).items():
        if isinstance(value, list):
            normalized[key] = value[0] if len(value) == 1 else value
        else:
            normalized[key] = value
    return normalized


class NatureHTTPHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the Neighborhood Nature web application."""

    # Set by ``create_handler_class``
    app = None

    server_version = 'NeighborhoodNature/0.1'

    @classmethod
    def create_handler_class(cls, app):
        """Create a handler class bound to an application instance."""

        class BoundHandler(cls):
            pass

        BoundHandler.app = app
        return BoundHandler

    @property
    def controller(self):
        return self.app.controller

    def log_message(self, format, *args):
        """Route the default access log through our logger when verbose."""
        config = getattr(self.app, 'config', None)
        if config is not None and (config.debug_mode or config.verbose_logging):
            logger.info(f"HTTP {format % args}")

    def do_GET(self):
        self._handle_request('GET')

    def do_POST(self):
        self._handle_request('POST')

    # ------------------------------------------------------------------
    def _handle_request(self, method: str):
        start_t = time.time()
        self._new_session_id: Optional[str] = None
        endpoint = ''
        try:
            parsed_url = urlparse(self.path)
            endpoint = parsed_url.path.strip('/')
            params = _normalize_params(parse_qs(parsed_url.query))

            if endpoint in STATIC_PAGES or endpoint in STATIC_ASSETS:
                if method != 'GET':
                    raise MethodNotAllowed(f'{endpoint or "/"} requires GET', details={'method': method})
                self._serve_static(endpoint)
                return

            data = params if method == 'GET' else self._read_body()
            response = self._dispatch(endpoint, method, data)
            self._send_response(response)
        except NatureError as exc:
            self._send_json_response(exc.to_payload(), status_code=exc.status)
        except Exception as e:
            logger.error(f"Request handler error: {e}", exc_info=True)
            self._send_json_response(error_response('INTERNAL_ERROR', str(e)), status_code=500)
        finally:
            config = getattr(self.app, 'config', None)
            if config is not None and config.get('json_logging'):
                logger.info('request_completed', extra={
                    'method': method,
                    'endpoint': endpoint,
                    'duration_ms': round((time.time() - start_t) * 1000.0, 3),
                })

    def _dispatch(self, endpoint: str, method: str, data: Dict[str, Any]) -> Dict[str, Any]:
        contract = HTTP_OPERATIONS.get((endpoint, method))
        if contract is None:
            if any(route == endpoint for route, _ in HTTP_OPERATIONS):
                allowed = sorted(verb for route, verb in HTTP_OPERATIONS if route == endpoint)
                raise MethodNotAllowed(
                    f'{endpoint} does not accept {method}',
                    details={'method': method, 'allowed': allowed},
                )
            raise NotFoundError(f'Unknown endpoint: /{endpoint}', details={'endpoint': endpoint})

        operation = getattr(self.controller, contract.operation)
        if contract.session_scoped:
            return operation(self._session_id(), data)
        if contract.operation == 'get_health':
            return operation()
        return operation(data)

    # ------------------------------------------------------------------
    def _session_id(self) -> str:
        header = self.headers.get('Cookie')
        if header:
            try:
                cookie = SimpleCookie(header)
            except CookieError:
                cookie = SimpleCookie()
            morsel = cookie.get(SESSION_COOKIE)
            if morsel is not None and morsel.value:
                return morsel.value
        if not self._new_session_id:
            self._new_session_id = secrets.token_hex(16)
        return self._new_session_id

    def _read_body(self) -> Dict[str, Any]:
        try:
            content_length = int(self.headers.get('Content-Length', 0))
        except ValueError:
            raise ValidationFailure('Invalid Content-Length header')
        if content_length > MAX_BODY_BYTES:
            raise ValidationFailure('Request body too large', details={'limit': MAX_BODY_BYTES})
        raw = self.rfile.read(content_length) if content_length > 0 else b''
        if not raw:
            return {}

        content_type = (self.headers.get('Content-Type') or '').split(';')[0].strip().lower()
        try:
            text = raw.decode('utf-8')
            if content_type == FORM_CONTENT_TYPE:
                return _normalize_params(parse_qs(text, keep_blank_values=True, errors='strict'))
        except UnicodeDecodeError:
            raise ValidationFailure('Request body is not valid UTF-8')
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            raise ValidationFailure('Invalid JSON')
        if not isinstance(data, dict):
            raise ValidationFailure('JSON body must be an object')
        return data

    # ------------------------------------------------------------------
    def _send_response(self, response: Dict[str, Any]):
        if not isinstance(response, dict):
            self._send_json_response(error_response('INVALID_RESPONSE', 'Unexpected response type'), status_code=500)
            return
        if response.get('success') is False:
            self._send_json_response(response, status_code=status_for(response.get('error_code')))
            return
        if response.get('_redirect'):
            self._send_redirect(response['_redirect'])
            return
        if response.get('_raw_text') is not None:
            content_type = response.get('_content_type', 'text/plain; charset=utf-8')
            self._send_raw_response(response['_raw_text'], content_type)
            return
        self._send_json_response(response)

    def _serve_static(self, endpoint: str):
        if endpoint in STATIC_PAGES:
            filename, content_type = STATIC_PAGES[endpoint], 'text/html; charset=utf-8'
        else:
            filename, content_type = endpoint, STATIC_ASSETS[endpoint]
        try:
            content = (STATIC_DIR / filename).read_text(encoding='utf-8')
        except OSError as exc:
            logger.warning('static_unavailable', extra={'file': filename, 'error': str(exc)})
            raise NotFoundError(f'Page not found: /{endpoint}', details={'endpoint': endpoint}) from exc
        self._send_raw_response(content, content_type)

    def _add_common_headers(self):
        """Add security headers and the session cookie when one was issued."""
        self.send_header('Content-Security-Policy',
                         "default-src 'self'; script-src 'self'; object-src 'none'; "
                         "style-src 'self' 'unsafe-inline'; img-src 'self' data:; "
                         "connect-src 'self'; frame-src 'none'; form-action 'self'")
        self.send_header('X-Content-Type-Options', 'nosniff')
        self.send_header('X-Frame-Options', 'DENY')
        self.send_header('Referrer-Policy', 'strict-origin-when-cross-origin')
        new_session = getattr(self, '_new_session_id', None)
        if new_session:
            self.send_header('Set-Cookie', f'{SESSION_COOKIE}={new_session}; Path=/; HttpOnly; SameSite=Lax')

    def _send_redirect(self, location: str, status_code: int = 303):
        self.send_response(status_code)
        self.send_header('Location', location)
        self.send_header('Content-Length', '0')
        self._add_common_headers()
        self.end_headers()

    def _send_json_response(self, data: Any, status_code: int = 200):
        body = json.dumps(data, ensure_ascii=False, separators=(',', ':')).encode('utf-8')
        self._send_bytes(body, 'application/json', status_code)

    def _send_raw_response(self, content: str, content_type: str, status_code: int = 200):
        self._send_bytes(content.encode('utf-8'), content_type, status_code)

    def _send_bytes(self, body: bytes, content_type: str, status_code: int):
        self.send_response(status_code)
        self.send_header('Content-Type', content_type)
        self.send_header('Content-Length', str(len(body)))
        self._add_common_headers()
        self.end_headers()
        self.wfile.write(body)


__all__ = ['NatureHTTPHandler', 'SESSION_COOKIE', 'STATIC_PAGES']
