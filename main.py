import sys
import uvicorn

from attendance_api.main import app  # noqa: F401

def run_https():
    """Run HTTPS server on port 9105"""
    print("🔒 Starting HTTPS server on port 9105...")
    uvicorn.run(
        "attendance_api.main:app",  # Use string import
        host="0.0.0.0",
        port=9105,
        reload=False,
        ssl_certfile="cert.pem",
        ssl_keyfile="key.pem"
    )

def run_http():
    """Run HTTP server on port 9106"""
    print("🚀 Starting HTTP server on port 9106...")
    uvicorn.run(
        "attendance_api.main:app",  # Use string import
        host="0.0.0.0",
        port=9106,
        reload=False
    )

if __name__ == "__main__":
    # WebAuthn requires a secure context outside localhost
    if "--https" in sys.argv:
        run_https()
    else:
        run_http()
