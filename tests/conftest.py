from http.cookies import SimpleCookie

import pytest
from starlette.requests import Request
from starlette.responses import Response


def build_request(cookies: dict[str, str] | None = None, query_string: str = "") -> Request:
    headers = []
    if cookies:
        header = "; ".join(f"{k}={v}" for k, v in cookies.items())
        headers.append((b"cookie", header.encode("latin-1")))
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/",
            "headers": headers,
            "query_string": query_string.encode("latin-1"),
        }
    )


def set_cookies(response: Response) -> dict[str, str]:
    jar = SimpleCookie()
    for raw in response.headers.getlist("set-cookie"):
        jar.load(raw)
    return {name: morsel.value for name, morsel in jar.items()}


@pytest.fixture
def make_request():
    return build_request


@pytest.fixture
def written_cookies():
    return set_cookies
