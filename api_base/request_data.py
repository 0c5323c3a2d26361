"""
api-base: Request Normalizer
=============================

What:  Collects every input a request carries into one flat dict.
Why:   Service operations should not care whether a value arrived in the
       query string, a form, a JSON body or the URL path.
How:   Sources are merged left to right, later sources overwriting earlier keys:

           query → form → raw body pairs → JSON body → route params

       Route params are merged last because they are the most specific input
       and are chosen by the caller, not the client.

Input-shape Policy:
    Malformed or empty bodies never raise. An unparsable JSON body, a body
    that is not valid UTF-8, a broken multipart stream or a client disconnect
    each contribute an empty mapping. The service decides whether missing
    fields are an error.

Stream Ordering:
    Starlette's form parser consumes the request stream. The raw body is read
    (and cached on the request) before the form is parsed, so both the form
    parser and the JSON/raw parsers see the same bytes.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple
from urllib.parse import parse_qsl

from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import ClientDisconnect, Request

logger = logging.getLogger(__name__)

FORM_URLENCODED = "application/x-www-form-urlencoded"
MULTIPART_FORM = "multipart/form-data"


class RequestNormalizer:
    """
    Read-only view over a Starlette request that merges all of its inputs.

    The normalizer never mutates the request. Reading the body caches it on
    the request object, which is how Starlette itself makes the body
    re-readable.
    """

    def __init__(self, request: Request):
        self.request = request
        self._body: Optional[bytes] = None
        self._disconnected = False

    @property
    def media_type(self) -> str:
        """Content-Type without parameters, lowercased ('' when absent)."""
        content_type = self.request.headers.get("content-type", "")
        return content_type.split(";", 1)[0].strip().lower()

    async def collect(self, route_params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """
        Merge all request inputs; ``route_params`` win every key collision.

        Returns:
            A new dict (possibly empty). Never None.
        """
        # Cache the body before the form parser drains the stream
        await self.get_body()

        data: Dict[str, Any] = {}
        data.update(self.get_query_params())
        data.update(await self.get_form_data())
        data.update(await self.get_raw_input())
        data.update(await self.get_json_data())
        if route_params:
            data.update(route_params)
        return data

    def get_query_params(self) -> Dict[str, Any]:
        return _group(self.request.query_params.multi_items())

    async def get_body(self) -> bytes:
        if self._body is None:
            try:
                self._body = await self.request.body()
            except ClientDisconnect:
                logger.debug("Client disconnected before the body was read")
                self._body = b""
                self._disconnected = True
        return self._body

    async def get_form_data(self) -> Dict[str, Any]:
        """Plain (non-file) form fields of an urlencoded or multipart body."""
        form = await self._get_form()
        if form is None:
            return {}
        return _group(
            (key, value) for key, value in form.multi_items()
            if not isinstance(value, UploadFile)
        )

    async def get_raw_input(self) -> Dict[str, Any]:
        """
        ``key=value&...`` pairs from a body the form parser does not handle.

        Covers bodies sent without a form content type (for example a PUT
        from a client that omits the header). JSON documents, form bodies and
        anything that is not a well-formed pair list yield {}.
        """
        if self.media_type in (FORM_URLENCODED, MULTIPART_FORM, "application/json"):
            return {}

        body = await self.get_body()
        if not body:
            return {}

        try:
            text = body.decode("utf-8").strip()
        except UnicodeDecodeError:
            return {}
        if not text or text[0] in "{[":
            return {}

        try:
            pairs = parse_qsl(text, keep_blank_values=True, strict_parsing=True)
        except ValueError:
            return {}
        return _group(pairs)

    async def get_json_data(self) -> Dict[str, Any]:
        """
        The body parsed as a JSON object, or {} for anything else.

        Only attempted for a non-empty body. Parse failures, undecodable
        bytes and top-level arrays or scalars all map to {} silently.
        """
        body = await self.get_body()
        if not body or not body.strip():
            return {}

        try:
            parsed = json.loads(body)
        except (ValueError, RecursionError):
            logger.debug("Request body is not valid JSON; ignoring it")
            return {}

        if not isinstance(parsed, dict):
            return {}
        return parsed

    async def get_file_input(self, field: str) -> Optional[UploadFile]:
        """First uploaded file for ``field``, or None when there is none."""
        files = await self.get_file_inputs(field)
        return files[0] if files else None

    async def get_file_inputs(self, field: str) -> List[UploadFile]:
        """Every uploaded file for ``field`` (multi-file inputs)."""
        if self.media_type != MULTIPART_FORM:
            return []
        form = await self._get_form()
        if form is None:
            return []
        return [value for value in form.getlist(field) if isinstance(value, UploadFile)]

    async def _get_form(self) -> Optional[FormData]:
        if self.media_type not in (FORM_URLENCODED, MULTIPART_FORM):
            return None

        await self.get_body()
        if self._disconnected:
            return None
        content_type = self.request.headers["content-type"].lower()
        if self.media_type == MULTIPART_FORM and "boundary=" not in content_type:
            logger.debug("Multipart body without a boundary; ignoring it")
            return None
        try:
            return await self.request.form()
        except (MultiPartException, HTTPException) as e:
            logger.debug("Could not parse form body: %s", e)
            return None


def _group(items: Iterable[Tuple[str, Any]]) -> Dict[str, Any]:
    """
    Collapse multi-valued pairs: one occurrence stays a scalar, repeats
    become a list in arrival order.
    """
    grouped: Dict[str, Any] = {}
    for key, value in items:
        if key not in grouped:
            grouped[key] = value
        elif isinstance(grouped[key], list):
            grouped[key].append(value)
        else:
            grouped[key] = [grouped[key], value]
    return grouped
