from starlette.responses import Response

from app.funding.security import build_csp, get_nonce, set_security_headers


def test_build_csp_keeps_directive_order():
    csp = build_csp({"img-src": "data:", "style-src": "'none'"})
    assert csp == "img-src data:; style-src 'none'"


def test_nonce_is_fresh():
    nonces = {get_nonce() for _ in range(20)}
    assert len(nonces) == 20
    assert all(len(n) >= 16 for n in nonces)


def test_security_headers():
    res = Response()
    set_security_headers(
        res, nonce="abc", domain="https://shop.example", provider_domain="paypal.com"
    )
    assert res.headers["Access-Control-Allow-Origin"] == "https://shop.example"
    directives = dict(d.split(" ", 1) for d in res.headers["Content-Security-Policy"].split("; "))
    assert directives["script-src"] == "'self' https://*.paypal.com:* 'nonce-abc'"
    assert directives["connect-src"] == "'self' https://*.paypal.com:*"
    assert directives["frame-ancestors"] == "https://shop.example"
    assert directives["img-src"] == "data:"
    for name in ["style-src", "frame-src", "font-src", "object-src", "media-src"]:
        assert directives[name] == "'none'"
