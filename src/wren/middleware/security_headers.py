"""Security headers middleware — the mandatory first pipeline stage.

Adds the helmet-style header set to every response, including error
responses produced by the error boundary. Content-Security-Policy is off
unless a policy is configured.
"""

from dataclasses import dataclass

from wren.http.request import Request
from wren.http.response import Response
from wren.middleware.protocol import Next


@dataclass(frozen=True, slots=True)
class SecurityHeadersConfig:
    """Configuration for security headers.

    All values are applied as-is. ``None`` omits the header.
    """

    content_security_policy: str | None = None
    cross_origin_opener_policy: str | None = "same-origin"
    cross_origin_resource_policy: str | None = "same-origin"
    referrer_policy: str | None = "no-referrer"
    strict_transport_security: str | None = "max-age=15552000; includeSubDomains"
    x_content_type_options: str | None = "nosniff"
    x_dns_prefetch_control: str | None = "off"
    x_download_options: str | None = "noopen"
    x_frame_options: str | None = "SAMEORIGIN"
    x_permitted_cross_domain_policies: str | None = "none"
    x_xss_protection: str | None = "0"

    def header_pairs(self) -> tuple[tuple[str, str], ...]:
        """Resolved ``(name, value)`` pairs, skipping disabled headers."""
        candidates = (
            ("Content-Security-Policy", self.content_security_policy),
            ("Cross-Origin-Opener-Policy", self.cross_origin_opener_policy),
            ("Cross-Origin-Resource-Policy", self.cross_origin_resource_policy),
            ("Referrer-Policy", self.referrer_policy),
            ("Strict-Transport-Security", self.strict_transport_security),
            ("X-Content-Type-Options", self.x_content_type_options),
            ("X-DNS-Prefetch-Control", self.x_dns_prefetch_control),
            ("X-Download-Options", self.x_download_options),
            ("X-Frame-Options", self.x_frame_options),
            ("X-Permitted-Cross-Domain-Policies", self.x_permitted_cross_domain_policies),
            ("X-XSS-Protection", self.x_xss_protection),
        )
        return tuple((name, value) for name, value in candidates if value)


class SecurityHeadersMiddleware:
    """Add security headers to every response.

    Usage::

        from wren.middleware import SecurityHeadersMiddleware

        stage = SecurityHeadersMiddleware()

    Or with custom config::

        stage = SecurityHeadersMiddleware(SecurityHeadersConfig(
            x_frame_options="DENY",
        ))
    """

    __slots__ = ("_pairs", "config")

    def __init__(self, config: SecurityHeadersConfig | None = None) -> None:
        self.config = config or SecurityHeadersConfig()
        self._pairs = self.config.header_pairs()

    async def __call__(self, request: Request, next: Next) -> Response:
        response = await next(request)
        present = {name.lower() for name, _ in response.headers}
        for name, value in self._pairs:
            # A handler's explicit header wins
            if name.lower() not in present:
                response = response.with_header(name, value)
        return response
