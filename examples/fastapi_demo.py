"""
FastAPI demo with signed URL protection.

Usage:
    # Install dependencies
    pip install -e ".[fastapi]"

    # Run the server
    SIGNED_URL_SECRET=MySecret uvicorn examples.fastapi_demo:app --port 8009 --reload

    # Or directly
    SIGNED_URL_SECRET=MySecret python examples/fastapi_demo.py

Test with curl:
    # Guarded endpoint without a signature: 403 "Bad URL hash"
    curl -i http://localhost:8009/

    # Get a 5 second signed URL for / bound to your address, and follow it
    curl -iL http://localhost:8009/backdoor

    # Static files under /static require a signed URL too
    curl -i "http://localhost:8009/static/sensitive-info.pdf"

Environment variables:
    SIGNED_URL_SECRET - Shared signing secret (required)
    SIGNED_URL_DIGEST - HMAC digest (default: md5)
"""

from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, RedirectResponse

from urlguard import SignedUrlASGIMiddleware, load_options
from urlguard.middleware.asgi import signed_url_required

options = load_options()
guard = options.create_guard()

app = FastAPI(
    title="Signed URL Demo API",
    description="Demo API with signed URL protection",
    version="0.1.0",
)

# Endpoint-style protection: everything under /static
app.add_middleware(
    SignedUrlASGIMiddleware,
    guard=guard,
    protected_paths=["/static"],
)


@app.get("/", response_class=PlainTextResponse)
@signed_url_required(guard=guard)
async def root(request: Request):
    """Route-style protection: only reachable with a valid signed URL."""
    return "Hello World!"


@app.get("/backdoor")
async def backdoor(request: Request):
    """Issue a 5 second signed URL for / bound to the caller and redirect to it."""
    signed_url = guard.generate_signed_url("/", timedelta(seconds=5), request.client.host)
    return RedirectResponse(signed_url)


@app.get("/static/{name}", response_class=PlainTextResponse)
async def static_file(name: str):
    """Stand-in for a static file handler."""
    return f"contents of {name}"


@app.get("/sign/{name}")
async def sign(name: str, request: Request):
    """Returns a one minute signed URL for a static file."""
    return {
        "url": guard.generate_signed_url(
            f"/static/{name}", timedelta(minutes=1), request.client.host
        ),
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8009)
