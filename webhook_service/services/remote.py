"""
Remote processing procedure — the primary active-mode path.

The data store exposes a single RPC that maps the payload, resolves the
contact, creates the lead and places it, all in one call. It is reached over
HTTP (PostgREST-style: POST {base}/process_webhook_payload) through the
'remote_rpc' circuit breaker.
"""
import logging
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger('services.remote')

PROCEDURE = 'process_webhook_payload'


class RemoteProcedureError(Exception):
    """The remote procedure answered with a non-2xx status or unreadable body."""
    def __init__(self, message, status_code=None):
        self.status_code = status_code
        super().__init__(message)


class RemoteProcedureClient:
    """
    Usage:
        client = RemoteProcedureClient(base_url, api_key, timeout=10, breaker=cb)
        data = client.process_webhook(endpoint_id, payload, headers, source_ip)
    """

    def __init__(self, base_url: str, api_key: Optional[str] = None, timeout: float = 10.0,
                 breaker=None, http=None):
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout
        self.breaker = breaker
        self.http = http or requests

    @classmethod
    def from_settings(cls, settings, breaker=None):
        if not settings.remote_enabled:
            return None
        return cls(
            settings.remote_rpc_url,
            api_key=settings.remote_rpc_key,
            timeout=settings.remote_rpc_timeout,
            breaker=breaker,
        )

    def _headers(self) -> Dict[str, str]:
        headers = {'Content-Type': 'application/json'}
        if self.api_key:
            headers['apikey'] = self.api_key
            headers['Authorization'] = f'Bearer {self.api_key}'
        return headers

    def _post(self, url, body):
        resp = self.http.post(url, json=body, headers=self._headers(), timeout=self.timeout)
        if resp.status_code >= 300:
            raise RemoteProcedureError(
                f"{PROCEDURE} returned {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as e:
            raise RemoteProcedureError(f"{PROCEDURE} returned invalid JSON") from e

    def process_webhook(self, endpoint_id: int, payload: Any, headers: Dict[str, str],
                        source_ip: Optional[str]) -> Any:
        url = f"{self.base_url}/{PROCEDURE}"
        body = {
            'p_webhook_endpoint_id': endpoint_id,
            'p_payload': payload,
            'p_headers': dict(headers or {}),
            'p_source_ip': source_ip,
        }
        logger.info("Calling %s for endpoint %s", PROCEDURE, endpoint_id)
        if self.breaker is not None:
            return self.breaker.call(self._post, url, body)
        return self._post(url, body)
