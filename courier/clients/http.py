"""
The `Http` dispatcher and the default httpx-backed transport.

`Http.call` drives one request end to end: default headers and XSRF, the
request-direction interceptor stages, cache and in-flight de-duplication, the
transport call, the response-direction stages, and finally delivery through
the completion coalescer.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Iterable, Mapping
from functools import partial
from typing import Any

import httpx

from ..cache import CacheHandle
from ..collaborators import (
    CookieStore,
    HttpxCookieStore,
    LocationResolver,
    RawResponse,
    StaticLocation,
    Timer,
    Transport,
    UrlRewriter,
    identity_rewriter,
)
from ..config import HttpConfig, HttpDefaults
from ..exceptions import CacheFailureError, TimeoutNotSupportedError, TransportError
from ..policies import CachePolicy
from .coalescer import Coalescer
from .headers import (
    find_header,
    is_same_origin,
    parse_headers,
    resolve_header_values,
    strip_content_type,
)
from .interceptors import Interceptor, Interceptors, coerce_interceptors
from .pending import PendingRequestTable
from .pipeline import (
    Failed,
    HeaderValue,
    Outcome,
    Pending,
    Ready,
    RequestConfig,
    Response,
    Stage,
    fold,
    outcome_of,
)
from .query import build_url

logger = logging.getLogger(__name__)

_TEXTUAL_MEDIA_HINTS = ("json", "xml", "javascript", "x-www-form-urlencoded")

CacheOption = CachePolicy | CacheHandle | bool | None
InterceptorsOption = Interceptor | Interceptors | Iterable[Interceptor] | None


# =============================================================================
# Transport
# =============================================================================


def _is_textual(response: httpx.Response) -> bool:
    """True when the body should be decoded; a missing Content-Type counts as text."""
    content_type = response.headers.get("content-type")
    if content_type is None:
        return True
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type.startswith("text/") or any(
        hint in media_type for hint in _TEXTUAL_MEDIA_HINTS
    )


class HttpxTransport:
    """
    Transport backed by `httpx.AsyncClient`.

    Cookies from the client's jar are only attached when a call asks for
    credentials. Non-2xx statuses are returned as normal responses; only
    network-level failures raise `TransportError`. Bodies with a textual
    Content-Type (or none) are decoded to `str`; anything else stays `bytes`.
    """

    def __init__(
        self,
        *,
        base_url: str = "",
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        follow_redirects: bool = True,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            transport=transport,
            follow_redirects=follow_redirects,
        )

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    def _build_request(
        self,
        url: str,
        *,
        method: str,
        headers: Mapping[str, str],
        body: Any | None,
        with_credentials: bool,
    ) -> httpx.Request:
        content = body.read() if callable(getattr(body, "read", None)) else body
        if with_credentials:
            return self._client.build_request(method, url, headers=headers, content=content)
        return httpx.Request(
            method,
            self._client.base_url.join(url),
            headers=headers,
            content=content,
        )

    async def request(
        self,
        url: str,
        *,
        method: str,
        headers: Mapping[str, str],
        body: Any | None,
        with_credentials: bool,
    ) -> RawResponse:
        try:
            request = self._build_request(
                url,
                method=method,
                headers=headers,
                body=body,
                with_credentials=with_credentials,
            )
            response = await self._client.send(request)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        raw_headers = "\n".join(f"{key}: {value}" for key, value in response.headers.multi_items())
        body = response.text if _is_textual(response) else response.content
        return RawResponse(status=response.status_code, body=body, raw_headers=raw_headers)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


# =============================================================================
# Dispatcher
# =============================================================================


class Http:
    """
    Interceptable HTTP dispatcher with caching, de-duplication and coalescing.

    Example:
        ```python
        async with Http(HttpxTransport(base_url="https://api.example")) as http:
            response = await http.get("/items", params={"page": 2})
            print(response.status, response.body)
        ```

    Caching is off unless `HttpDefaults.cache` or a per-call `cache=` handle is
    given. While a cache is in effect, concurrent calls for the same URL share
    one transport call.
    """

    def __init__(
        self,
        transport: Transport | None = None,
        *,
        defaults: HttpDefaults | None = None,
        config: HttpConfig | None = None,
        interceptors: Interceptors | None = None,
        location: LocationResolver | None = None,
        cookies: CookieStore | Mapping[str, str] | None = None,
        rewriter: UrlRewriter | None = None,
        timer: Timer | None = None,
    ) -> None:
        self._transport: Transport = transport or HttpxTransport()
        self.defaults = defaults or HttpDefaults()
        self.config = config or HttpConfig()
        self.interceptors = interceptors if interceptors is not None else Interceptors()
        self._location = location or StaticLocation()
        if cookies is None and isinstance(self._transport, HttpxTransport):
            cookies = HttpxCookieStore(self._transport.cookies)
        self._cookies: CookieStore | Mapping[str, str] = cookies if cookies is not None else {}
        self._rewriter = rewriter or identity_rewriter
        self._pending = PendingRequestTable()
        self._coalescer = Coalescer(self.config.coalesce_duration, timer=timer)

    async def __aenter__(self) -> Http:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the transport if it holds resources."""
        close = getattr(self._transport, "aclose", None)
        if close is not None:
            await close()

    @property
    def pending_requests(self) -> list[asyncio.Future[Response]]:
        """Futures for the requests currently in flight (de-duplicated calls only)."""
        return self._pending.values()

    def call(
        self,
        url: str,
        method: str = "GET",
        *,
        body: Any | None = None,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, HeaderValue] | None = None,
        with_credentials: bool = False,
        xsrf_header_name: str | None = None,
        xsrf_cookie_name: str | None = None,
        interceptors: InterceptorsOption = None,
        cache: CacheOption = None,
        timeout: Any | None = None,
    ) -> asyncio.Future[Response]:
        """
        Issue a request and return a future for its `Response`.

        Must be called with a running event loop. When no interceptor suspends,
        the transport is invoked before this method returns.

        Args:
            url: Absolute or relative URL (passed through the URL rewriter).
            method: HTTP method; normalized to uppercase.
            body: Request payload. Non-text bodies are JSON-encoded by the
                default interceptor.
            params: Query parameters, appended in sorted key order.
            headers: Header values or zero-argument callables producing them.
                A callable returning None drops the header.
            with_credentials: Attach credentials (cookies) to the request.
            xsrf_header_name: Override for `HttpDefaults.xsrf_header_name`.
            xsrf_cookie_name: Override for `HttpDefaults.xsrf_cookie_name`.
            interceptors: Per-call interceptors, wrapped outside the global ones.
            cache: `CachePolicy`, a cache handle, or a bool. `None`/`True`
                use the default cache; `False`/`CachePolicy.DISABLED` skip it.
            timeout: Not supported; any value other than None raises.

        Raises:
            TimeoutNotSupportedError: If `timeout` is given.
        """
        if timeout is not None:
            raise TimeoutNotSupportedError(timeout)

        loop = asyncio.get_running_loop()
        url = self._rewriter(url)
        method = method.upper()

        request_headers: dict[str, HeaderValue] = dict(headers) if headers is not None else {}
        self.defaults.headers.set_headers(request_headers, method)
        self._apply_xsrf(request_headers, url, xsrf_header_name, xsrf_cookie_name)
        resolve_header_values(request_headers)

        config = RequestConfig(
            url=url,
            method=method,
            params=params,
            headers=request_headers,
            body=body,
            with_credentials=with_credentials,
            cache=cache,
            xsrf_header_name=xsrf_header_name,
            xsrf_cookie_name=xsrf_cookie_name,
        )

        chain = [Stage(self._server_request, None, "transport")]
        self.interceptors.construct_chain(chain)
        per_call = coerce_interceptors(interceptors)
        if per_call is not None:
            per_call.construct_chain(chain)

        result: asyncio.Future[Response] = loop.create_future()
        self._deliver(fold(chain, config), result)
        return result

    # -------------------------------------------------------------------------
    # Shortcuts
    # -------------------------------------------------------------------------

    def get(self, url: str, **options: Any) -> asyncio.Future[Response]:
        return self.call(url, "GET", **options)

    def head(self, url: str, **options: Any) -> asyncio.Future[Response]:
        return self.call(url, "HEAD", **options)

    def delete(self, url: str, **options: Any) -> asyncio.Future[Response]:
        return self.call(url, "DELETE", **options)

    def jsonp(self, url: str, **options: Any) -> asyncio.Future[Response]:
        return self.call(url, "JSONP", **options)

    def post(self, url: str, body: Any | None = None, **options: Any) -> asyncio.Future[Response]:
        return self.call(url, "POST", body=body, **options)

    def put(self, url: str, body: Any | None = None, **options: Any) -> asyncio.Future[Response]:
        return self.call(url, "PUT", body=body, **options)

    def patch(self, url: str, body: Any | None = None, **options: Any) -> asyncio.Future[Response]:
        return self.call(url, "PATCH", body=body, **options)

    # -------------------------------------------------------------------------
    # Building
    # -------------------------------------------------------------------------

    def _apply_xsrf(
        self,
        headers: dict[str, HeaderValue],
        url: str,
        header_name: str | None,
        cookie_name: str | None,
    ) -> None:
        if not is_same_origin(url, self._location.current_origin()):
            return
        token = self._cookies.get(cookie_name or self.defaults.xsrf_cookie_name)
        if token is None:
            return
        name = header_name or self.defaults.xsrf_header_name
        if find_header(headers, name) is None:
            headers[name] = token

    def _resolve_cache(self, option: CacheOption) -> CacheHandle | None:
        if option is False or option is CachePolicy.DISABLED:
            return None
        if option is None or option is True or option is CachePolicy.DEFAULT:
            return self.defaults.cache
        return option

    # -------------------------------------------------------------------------
    # Cache / de-duplication / transport
    # -------------------------------------------------------------------------

    def _server_request(self, config: RequestConfig) -> Response | asyncio.Future[Response]:
        if config.body is None:
            strip_content_type(config.headers)
        url = build_url(config.url, config.params)
        config.freeze()

        cache = self._resolve_cache(config.cache)
        if cache is not None:
            pending = self._pending.get(url)
            if pending is not None:
                logger.debug("Joining in-flight request for %s", url)
                return pending
            if config.method == "GET":
                cached = cache.get(url)
                if cached is not None:
                    if not isinstance(cached, Response):
                        raise CacheFailureError(url, cached)
                    logger.debug("Cache hit for %s", url)
                    return cached.defensive_copy()

        loop = asyncio.get_running_loop()
        logger.debug("%s %s", config.method, url)
        sent = self._transport.request(
            url,
            method=config.method,
            headers={name: str(value) for name, value in config.headers.items()},
            body=config.body,
            with_credentials=config.with_credentials,
        )
        if inspect.isawaitable(sent):
            task = asyncio.ensure_future(sent)
        else:
            # Synchronous transports hand back the RawResponse directly.
            task = loop.create_future()
            task.set_result(sent)

        future: asyncio.Future[Response] = loop.create_future()
        if cache is not None:
            self._pending.register(url, future)
        task.add_done_callback(
            partial(self._on_transport_done, url=url, config=config, cache=cache, future=future)
        )
        return future

    def _on_transport_done(
        self,
        task: asyncio.Future[RawResponse],
        *,
        url: str,
        config: RequestConfig,
        cache: CacheHandle | None,
        future: asyncio.Future[Response],
    ) -> None:
        if task.cancelled():
            self._pending.discard(url, future)
            future.cancel()
            return

        exc = task.exception()
        if exc is not None:
            self._pending.discard(url, future)
            if isinstance(exc, TransportError) and exc.status is not None:
                exc.response = Response(
                    status=exc.status,
                    body=exc.body,
                    headers=parse_headers(exc.raw_headers),
                    config=config,
                )
            logger.debug("Transport failed for %s: %s", url, exc)
            future.set_exception(exc)
            return

        try:
            raw = task.result()
            response = Response(
                status=raw.status,
                body=raw.body,
                headers=parse_headers(raw.raw_headers),
                config=config,
            )
            if cache is not None:
                cache.put(url, response)
        except Exception as e:
            self._pending.discard(url, future)
            future.set_exception(e)
            return
        self._pending.discard(url, future)
        future.set_result(response)

    # -------------------------------------------------------------------------
    # Completion
    # -------------------------------------------------------------------------

    def _deliver(self, outcome: Outcome, result: asyncio.Future[Response]) -> None:
        if isinstance(outcome, Pending):
            outcome.future.add_done_callback(
                lambda settled: self._deliver(_settled_outcome(settled), result)
            )
            return
        self._coalescer.enqueue(partial(_complete, result, outcome))


def _settled_outcome(future: asyncio.Future[Any]) -> Outcome:
    if future.cancelled():
        return Failed(asyncio.CancelledError())
    return outcome_of(future)


def _complete(result: asyncio.Future[Response], outcome: Ready | Failed) -> None:
    if result.done():
        return
    if isinstance(outcome, Failed) and isinstance(outcome.error, asyncio.CancelledError):
        result.cancel()
    elif isinstance(outcome, Failed):
        result.set_exception(outcome.error)
    else:
        result.set_result(outcome.value)
