"""
courier: an interceptable HTTP request pipeline.

Wraps a transport with an ordered interceptor chain, an optional response
cache with in-flight request de-duplication, and time-windowed completion
coalescing.

Example:
    ```python
    from courier import Http, HttpDefaults, MemoryCache

    async with Http(defaults=HttpDefaults(cache=MemoryCache())) as http:
        response = await http.get("https://api.example/items", params={"page": 1})
    ```
"""

from __future__ import annotations

from .cache import CacheHandle, MemoryCache
from .clients.coalescer import Coalescer
from .clients.headers import DefaultHeaders, parse_headers
from .clients.http import Http, HttpxTransport
from .clients.interceptors import DEFAULT_TRANSFORM_DATA, Interceptor, Interceptors
from .clients.pending import PendingRequestTable
from .clients.pipeline import RequestConfig, Response
from .clients.query import build_url, encode_uri_query
from .collaborators import HttpxCookieStore, LoopTimer, RawResponse, StaticLocation
from .config import HttpConfig, HttpDefaults
from .exceptions import (
    CacheFailureError,
    CourierError,
    InvalidArgumentError,
    TimeoutNotSupportedError,
    TransportError,
)
from .policies import CachePolicy

__version__ = "0.3.0"

__all__ = [
    "DEFAULT_TRANSFORM_DATA",
    "CacheFailureError",
    "CacheHandle",
    "CachePolicy",
    "Coalescer",
    "CourierError",
    "DefaultHeaders",
    "Http",
    "HttpConfig",
    "HttpDefaults",
    "HttpxCookieStore",
    "HttpxTransport",
    "Interceptor",
    "Interceptors",
    "InvalidArgumentError",
    "LoopTimer",
    "MemoryCache",
    "PendingRequestTable",
    "RawResponse",
    "RequestConfig",
    "Response",
    "StaticLocation",
    "TimeoutNotSupportedError",
    "TransportError",
    "__version__",
    "build_url",
    "encode_uri_query",
    "parse_headers",
]
