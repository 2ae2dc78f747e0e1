"""
identification.py — Identification Client
-----------------------------------------

Sends one CapturedImage to the identification relay and maps the answer onto
a PlantRecord or an IdentificationError.

Failure kinds:
- transport   the request never got an HTTP answer
- status      non-2xx answer; the relay's `error` / `details` become the message
- payload     body is not JSON, has no `plantData`, or fails schema validation
- incomplete  name, scientific name, light or water care missing

There is no automatic retry: the user re-triggers identification.

Dependencies:
- requests for HTTP
- pydantic for schema validation
"""

from __future__ import annotations
import logging
from typing import Optional

import requests
from pydantic import ValidationError as SchemaError

from config.settings import IDENTIFY_ENDPOINT, IDENTIFY_TIMEOUT, IDENTIFY_TRANSPORT
from core.exception import IdentificationError, MissingCredentialError, NoImageSelectedError
from core.models import (
    CapturedImage, IdentificationRequest, PlantRecord, missing_required_fields,
    upgrade_legacy_payload,
)

logger = logging.getLogger(__name__)

TRANSPORTS = ("multipart", "json")


def _server_detail(body) -> Optional[str]:
    if not isinstance(body, dict) or not body.get("error"):
        return None
    detail = str(body["error"])
    if body.get("details"):
        detail = f"{detail}: {body['details']}"
    return detail


class IdentificationClient:
    def __init__(
        self,
        api_key: Optional[str],
        endpoint: str = IDENTIFY_ENDPOINT,
        transport: str = IDENTIFY_TRANSPORT,
        timeout: Optional[float] = IDENTIFY_TIMEOUT,
        http: Optional[requests.Session] = None,
    ):
        if transport not in TRANSPORTS:
            raise ValueError(f"transport must be one of {TRANSPORTS}, got {transport!r}")
        self.api_key = api_key
        self.endpoint = endpoint
        self.transport = transport
        self.timeout = timeout
        self.http = http or requests.Session()

    def build_request(self, image: Optional[CapturedImage]) -> IdentificationRequest:
        if image is None or image.released:
            raise NoImageSelectedError()
        if not self.api_key:
            raise MissingCredentialError()
        return IdentificationRequest(image=image, api_key=self.api_key)

    def _send(self, request: IdentificationRequest) -> requests.Response:
        kwargs = {"headers": request.headers(), "timeout": self.timeout}
        if self.transport == "json":
            kwargs["json"] = request.json_body()
        else:
            kwargs["files"] = request.multipart()
        return self.http.post(self.endpoint, **kwargs)

    def identify(self, image: Optional[CapturedImage]) -> PlantRecord:
        request = self.build_request(image)

        try:
            response = self._send(request)
        except requests.RequestException as e:
            logger.debug("Identification transport failure: %r", e)
            raise IdentificationError("transport") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.ok:
            detail = _server_detail(body)
            logger.debug("Identification returned HTTP %s (%s)", response.status_code, detail)
            raise IdentificationError("status", detail=detail, status_code=response.status_code)

        data = body.get("plantData") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            logger.debug("Identification body has no plantData object: %.200r", body)
            raise IdentificationError("payload", status_code=response.status_code)

        data = upgrade_legacy_payload(data)
        missing = missing_required_fields(data)
        if missing:
            logger.debug("Identification result missing %s", missing)
            raise IdentificationError("incomplete", status_code=response.status_code)

        try:
            record = PlantRecord.model_validate(data)
        except SchemaError as e:
            logger.debug("Identification result failed validation: %s", e)
            raise IdentificationError("payload", status_code=response.status_code) from e

        logger.info("Identified %s (%s) at %.0f%%", record.common_name, record.scientific_name, record.confidence)
        return record
