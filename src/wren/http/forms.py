"""URL-encoded form bodies.

``FormData`` is what the body-parsing stage stores on the request for
``application/x-www-form-urlencoded`` submissions. Repeated keys keep
every value; plain lookup returns the first.
"""

from urllib.parse import parse_qsl

from wren.http.multimap import MultiValueMap


class FormData(MultiValueMap):
    """Parsed form fields.

    Usage::

        form = request.body_data
        username = form["username"]
        tags = form.get_list("tag")
    """

    __slots__ = ()


def parse_urlencoded(raw: bytes, charset: str = "utf-8") -> FormData:
    """Parse an ``application/x-www-form-urlencoded`` body.

    Raises:
        UnicodeDecodeError: If the body is not valid in *charset*.
        LookupError: If *charset* is not a known codec.
    """
    return FormData(parse_qsl(raw.decode(charset), keep_blank_values=True))
