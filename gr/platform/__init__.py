"""Process and HTTP primitives."""

from .http import HttpClient, HttpError, HttpResponse, MockHttpClient, RealHttpClient
from .process import ProcessError, run, run_streaming

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
    "ProcessError",
    "run",
    "run_streaming",
]
