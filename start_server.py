#!/usr/bin/env python3
"""Start the PharmaRoute API with uvicorn, honouring PORT and LOG_LEVEL."""

import os
import subprocess
import sys
from pathlib import Path

port = os.environ.get("PORT", "8000")
try:
    port_int = int(port)
except ValueError:
    print(f"Warning: Invalid PORT value '{port}', using default 8000", file=sys.stderr)
    port_int = 8000

log_level = os.environ.get("LOG_LEVEL", "info").lower()

src_path = Path(__file__).resolve().parent / "src"
if not src_path.is_dir():
    print(f"Warning: src directory not found at {src_path}", file=sys.stderr)
    src_path = Path.cwd()

pythonpath = os.environ.get("PYTHONPATH", "")
os.environ["PYTHONPATH"] = f"{src_path}{os.pathsep}{pythonpath}" if pythonpath else str(src_path)
sys.path.insert(0, str(src_path))

# Fail fast on configuration errors before handing over to uvicorn
try:
    from pharmaroute.config import settings
    import pharmaroute.main  # noqa: F401
except Exception as e:
    print(f"❌ Failed to import pharmaroute.main: {type(e).__name__}: {e}", file=sys.stderr)
    import traceback
    traceback.print_exc(file=sys.stderr)
    sys.exit(1)

if not settings.google_maps_api_key:
    print("⚠️ PHARMAROUTE_GOOGLE_MAPS_API_KEY is not set; routes will be served unoptimized", file=sys.stderr)

cmd = [
    sys.executable,
    "-m",
    "uvicorn",
    "pharmaroute.main:app",
    "--host",
    "0.0.0.0",
    "--port",
    str(port_int),
    "--log-level",
    log_level,
    "--proxy-headers",
    "--forwarded-allow-ips",
    "*",
]

print(f"🚀 Starting {settings.app_name} on port {port_int}...", file=sys.stderr)
try:
    sys.exit(subprocess.call(cmd))
except KeyboardInterrupt:
    print("⚠️ Server interrupted by user", file=sys.stderr)
    sys.exit(0)
