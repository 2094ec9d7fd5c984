"""
Flask demo with signed URL protection.

Usage:
    # Install dependencies
    pip install -e ".[flask]"

    # Run the server
    SIGNED_URL_SECRET=MySecret flask --app examples.flask_demo run --port 8010

    # Or directly
    SIGNED_URL_SECRET=MySecret python examples/flask_demo.py

Test with curl:
    # Guarded endpoint without a signature: 403 "Bad URL hash"
    curl -i http://localhost:8010/

    # Get a 5 second signed URL for / bound to your address, and follow it
    curl -iL http://localhost:8010/backdoor

Environment variables:
    SIGNED_URL_SECRET - Shared signing secret (required)
    SIGNED_URL_DIGEST - HMAC digest (default: md5)
"""

from datetime import timedelta

from flask import Flask, jsonify, redirect, request

from urlguard import SignedUrlWSGIMiddleware, load_options
from urlguard.middleware.flask_views import signed_url_required

options = load_options()
guard = options.create_guard()

app = Flask(__name__)

# Endpoint-style protection: everything under /files
app.wsgi_app = SignedUrlWSGIMiddleware(
    app.wsgi_app,
    guard=guard,
    protected_paths=["/files"],
)


@app.route("/")
@signed_url_required(guard=guard)
def root():
    """Route-style protection: only reachable with a valid signed URL."""
    return "Hello World!"


@app.route("/backdoor")
def backdoor():
    """Issue a 5 second signed URL for / bound to the caller and redirect to it."""
    signed_url = guard.generate_signed_url("/", timedelta(seconds=5), request.remote_addr)
    return redirect(signed_url)


@app.route("/files/<path:name>")
def files(name):
    """Stand-in for a file download."""
    return f"contents of {name}"


@app.route("/sign/<path:name>")
def sign(name):
    """Returns a one minute signed URL for a file."""
    return jsonify({
        "url": guard.generate_signed_url(f"/files/{name}", timedelta(minutes=1), request.remote_addr),
    })


@app.route("/health")
def health():
    """Health check endpoint."""
    return jsonify({"status": "ok"})


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8010, debug=True)
