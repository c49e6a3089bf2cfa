"""The catch-all not-found stage.

Registered after every explicit route. Picks the body by content
negotiation, in this order:

1. HTML, when the client accepts ``text/html`` — ``404.html`` from the
   configured error page directory if it exists, else the built-in page
2. JSON ``{"message": "Not found."}``
3. Plain text ``404 Not Found``

Status is 404 in all three cases.
"""

from pathlib import Path

from kida import ChoiceLoader, Environment, FileSystemLoader, PackageLoader

from wren.http.request import Request
from wren.http.response import Response

NOT_FOUND_TEMPLATE = "404.html"
NOT_FOUND_MESSAGE = "Not found."


def create_error_page_environment(error_page_dir: str | Path | None) -> Environment:
    """Create the kida Environment used to render error pages.

    A user directory, when present, shadows the templates shipped with
    wren. Created once during assembly and immutable afterwards.
    """
    loaders = []
    if error_page_dir is not None and Path(error_page_dir).is_dir():
        loaders.append(FileSystemLoader(str(error_page_dir)))
    loaders.append(PackageLoader("wren", "templates"))
    return Environment(loader=ChoiceLoader(loaders), autoescape=True)


class NotFoundHandler:
    """Unconditional endpoint for requests no route matched."""

    __slots__ = ("_env", "app_name")

    def __init__(self, env: Environment, *, app_name: str = "") -> None:
        self._env = env
        self.app_name = app_name

    def render_html(self, request: Request) -> str:
        template = self._env.get_template(NOT_FOUND_TEMPLATE)
        return template.render(
            {"app_name": self.app_name, "method": request.method, "path": request.path}
        )

    async def __call__(self, request: Request) -> Response:
        if request.accepts("html"):
            return Response(
                body=self.render_html(request),
                status=404,
                content_type="text/html; charset=utf-8",
            )
        if request.accepts("json"):
            return Response.json({"message": NOT_FOUND_MESSAGE}, status=404)
        return Response.plain("404 Not Found", status=404)
