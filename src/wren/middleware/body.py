"""Body-parsing middleware — JSON and URL-encoded bodies.

Reads the body once, enforcing a size ceiling both on the declared
``Content-Length`` and on the bytes actually received, then stores the
parsed value on the request (``request.body_data``). Bodies of any other
content type are left for the handler to read.
"""

import json as json_module

from wren.config import DEFAULT_MAX_BODY_SIZE
from wren.errors import BadRequest, PayloadTooLarge
from wren.http.forms import parse_urlencoded
from wren.http.request import Request
from wren.http.response import Response
from wren.middleware.protocol import Next

JSON_TYPES = ("application/json",)
FORM_TYPES = ("application/x-www-form-urlencoded",)


def _media_type(content_type: str) -> tuple[str, str]:
    """Split ``"application/json; charset=latin-1"`` into type and charset."""
    media, *params = (p.strip() for p in content_type.split(";"))
    charset = "utf-8"
    for param in params:
        name, _, value = param.partition("=")
        if name.strip().lower() == "charset" and value:
            charset = value.strip().strip('"')
    return media.lower(), charset


def _is_json(media: str) -> bool:
    # application/json plus structured suffixes like application/vnd.api+json
    return media in JSON_TYPES or media.endswith("+json")


class BodyParserMiddleware:
    """Parse JSON and form bodies up to *limit* bytes.

    Raises:
        PayloadTooLarge: The body is larger than the ceiling.
        BadRequest: The body could not be decoded or parsed.
    """

    __slots__ = ("limit",)

    def __init__(self, limit: int = DEFAULT_MAX_BODY_SIZE) -> None:
        self.limit = limit

    async def read_limited(self, request: Request) -> bytes:
        """Read the request body, failing as soon as it passes the ceiling."""
        declared = request.content_length
        if declared is not None and declared > self.limit:
            raise PayloadTooLarge(self.limit)

        chunks: list[bytes] = []
        received = 0
        async for chunk in request.stream():
            received += len(chunk)
            if received > self.limit:
                raise PayloadTooLarge(self.limit)
            chunks.append(chunk)
        raw = b"".join(chunks)
        request._cache["_body"] = raw
        return raw

    async def __call__(self, request: Request, next: Next) -> Response:
        content_type = request.content_type
        if not content_type or request.method in ("GET", "HEAD"):
            return await next(request)

        media, charset = _media_type(content_type)
        if _is_json(media):
            raw = await self.read_limited(request)
            if raw:
                try:
                    request._cache["_parsed"] = json_module.loads(raw.decode(charset))
                except (UnicodeDecodeError, LookupError, json_module.JSONDecodeError) as exc:
                    raise BadRequest("Malformed JSON body.") from exc
        elif media in FORM_TYPES:
            raw = await self.read_limited(request)
            try:
                request._cache["_parsed"] = parse_urlencoded(raw, charset)
            except (UnicodeDecodeError, LookupError) as exc:
                raise BadRequest("Malformed form body.") from exc

        return await next(request)
