from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable, Optional

import requests

from bizdash.api.resources import MULTIPART, RESOURCES, ResourceSpec
from bizdash.domain.errors import ApiError, ApiUnavailableError, ValidationError

log = logging.getLogger("bizdash.api")


class ApiClient:
    """Thin REST client for the backend's /api/<resource>/ endpoints."""

    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if token:
            self.session.headers.update({"Authorization": f"Token {token}"})

    @staticmethod
    def _spec(resource: str) -> ResourceSpec:
        spec = RESOURCES.get(resource)
        if spec is None:
            raise ValidationError(f"Unknown resource: {resource}")
        return spec

    def _url(self, spec: ResourceSpec, record_id: Any = None) -> str:
        url = self.base_url + spec.path
        if record_id is not None:
            url += f"{record_id}/"
        return url

    @staticmethod
    def _body(spec: ResourceSpec, payload: dict) -> dict:
        if spec.encoding == MULTIPART:
            # (None, value) tuples force multipart/form-data without file names.
            return {"files": {k: (None, "" if v is None else str(v)) for k, v in payload.items()}}
        return {"json": payload}

    @staticmethod
    def _detail(r: requests.Response) -> object:
        try:
            return r.json()
        except ValueError:
            return r.text[:500]

    def _request(self, method: str, spec: ResourceSpec, record_id: Any = None, payload: Optional[dict] = None):
        if payload is not None and not spec.writable:
            raise ValidationError(f"Resource {spec.name} is read-only.")

        url = self._url(spec, record_id)
        kwargs = self._body(spec, payload) if payload is not None else {}
        try:
            r = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            log.error("api_unreachable method=%s url=%s error=%s", method, url, e)
            raise ApiUnavailableError(f"Cannot reach API ({method} {url}): {e}") from e

        if not r.ok:
            detail = self._detail(r)
            log.error("api_error method=%s url=%s status=%s detail=%s", method, url, r.status_code, detail)
            raise ApiError(f"{method} {spec.name} failed: HTTP {r.status_code} {r.reason or ''}".strip(), r.status_code, detail)

        log.info("api_ok method=%s url=%s status=%s", method, url, r.status_code)
        if r.status_code == 204 or not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise ApiError(f"{method} {spec.name} returned invalid JSON.", r.status_code, r.text[:500]) from e

    def list(self, resource: str) -> list[dict]:
        data = self._request("GET", self._spec(resource))
        # Paginated DRF responses wrap rows in "results".
        if isinstance(data, dict) and isinstance(data.get("results"), list):
            data = data["results"]
        return data if isinstance(data, list) else []

    def get(self, resource: str, record_id: int) -> dict:
        return self._request("GET", self._spec(resource), record_id) or {}

    def create(self, resource: str, payload: dict) -> dict:
        return self._request("POST", self._spec(resource), payload=payload) or {}

    def update(self, resource: str, record_id: int, payload: dict) -> dict:
        return self._request("PUT", self._spec(resource), record_id, payload=payload) or {}

    def delete(self, resource: str, record_id: int) -> None:
        self._request("DELETE", self._spec(resource), record_id)

    def fetch_many(self, resources: Iterable[str], strict: bool = False) -> dict[str, list[dict]]:
        """
        Lists several resources in parallel.
        Non-strict: a failed resource is logged and comes back as [].
        """
        names = list(dict.fromkeys(resources))
        for name in names:
            self._spec(name)
        if not names:
            return {}

        with ThreadPoolExecutor(max_workers=len(names)) as pool:
            futures = {name: pool.submit(self.list, name) for name in names}

        out: dict[str, list[dict]] = {}
        for name, fut in futures.items():
            try:
                out[name] = fut.result()
            except (ApiError, ApiUnavailableError) as e:
                if strict:
                    raise
                log.error("api_fetch_fallback resource=%s error=%s", name, e)
                out[name] = []
        return out
