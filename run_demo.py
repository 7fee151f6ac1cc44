#!/usr/bin/env python3
"""
run_demo.py — One-command demo entry point.

Usage:
  python run_demo.py                      # Render the sample invoice
  python run_demo.py --doc-type Quotation # Render it as a quotation
  python run_demo.py --rows 60            # Force a multi-page table

This script:
1. Starts the document service in the background
2. Posts a generate request
3. Saves the returned PDF and prints a summary
4. Shuts down the document service
"""

from __future__ import annotations

import argparse
import logging
import os
import signal
import subprocess
import sys
import time
from pathlib import Path

import httpx
from dotenv import load_dotenv

load_dotenv()

SERVICE_HOST = "127.0.0.1"
SERVICE_PORT = int(os.getenv("SERVICE_PORT", "8002"))
SERVICE_URL = os.getenv("SERVICE_URL", f"http://{SERVICE_HOST}:{SERVICE_PORT}")
OUTPUT_DIR = Path(os.getenv("DEMO_OUTPUT_DIR", "sample_data"))

SEP = "--------------------------------------------------"


# ============================================================
# Service lifecycle
# ============================================================


def start_service() -> subprocess.Popen:
    """Launch the document FastAPI service as a subprocess."""
    return subprocess.Popen(
        [
            sys.executable,
            "-m",
            "uvicorn",
            "document_service.main:app",
            "--host",
            SERVICE_HOST,
            "--port",
            str(SERVICE_PORT),
            "--log-level",
            "warning",
        ],
        env=os.environ.copy(),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )


def wait_for_service(timeout: float = 15.0) -> bool:
    """Block until /health responds or timeout."""
    deadline = time.time() + timeout
    while time.time() < deadline:
        try:
            r = httpx.get(f"{SERVICE_URL}/health", timeout=2.0)
            if r.status_code == 200:
                return True
        except (httpx.ConnectError, httpx.ReadError):
            pass
        time.sleep(0.3)
    return False


def stop_process(proc: subprocess.Popen) -> None:
    """Gracefully stop a subprocess."""
    if proc.poll() is None:
        if sys.platform == "win32":
            proc.terminate()
        else:
            proc.send_signal(signal.SIGTERM)
        try:
            proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            proc.kill()


# ============================================================
# Request
# ============================================================


def build_payload(doc_type: str, rows: int) -> dict:
    return {
        "customer_name": "Contoso Traders",
        "customer_address": "12 Station Road, Sangli",
        "customer_phone": "+91 98220 00000",
        "doc_type": doc_type,
        "invoice_number": "",
        "invoice_date": "",
        "taxPercent": 18,
        "discount": 5,
        "items": [
            {"name": f"Item {n}", "price": f"{10 + n}.50", "qty": str(n % 3 + 1)}
            for n in range(1, rows + 1)
        ],
    }


def generate(payload: dict) -> httpx.Response:
    """Call POST /api/generate-pdf on the document service."""
    resp = httpx.post(f"{SERVICE_URL}/api/generate-pdf", json=payload, timeout=60.0)
    resp.raise_for_status()
    return resp


def print_demo_output(resp: httpx.Response, saved_to: Path) -> None:
    print()
    print(SEP)
    print("INVOICE / QUOTATION PDF DEMO")
    print(SEP)
    print(f"Request ID:   {resp.headers.get('x-request-id', '')}")
    print(f"Filename:     {resp.headers.get('x-filename', '')}")
    print(f"Content-Type: {resp.headers.get('content-type', '')}")
    print(f"Size:         {len(resp.content)} bytes")
    print(f"Saved to:     {saved_to}")
    print(SEP)


# ============================================================
# Main
# ============================================================


def main() -> None:
    parser = argparse.ArgumentParser(description="Invoice / quotation PDF demo")
    parser.add_argument("--doc-type", default="Invoice", help="Document title (default: Invoice)")
    parser.add_argument("--rows", type=int, default=5, help="Number of line items (default: 5)")
    parser.add_argument(
        "--no-service",
        action="store_true",
        help="Skip starting the document service (if already running)",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING)

    service_proc = None
    try:
        if not args.no_service:
            service_proc = start_service()
            if not wait_for_service():
                print("ERROR: Document service failed to start.", file=sys.stderr)
                stop_process(service_proc)
                sys.exit(1)

        resp = generate(build_payload(args.doc_type, args.rows))
        OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
        saved_to = OUTPUT_DIR / resp.headers.get("x-filename", "document.pdf")
        saved_to.write_bytes(resp.content)
        print_demo_output(resp, saved_to)

    except KeyboardInterrupt:
        print("\nInterrupted.")
    except Exception as exc:
        print(f"\nERROR: {exc}", file=sys.stderr)
        sys.exit(1)
    finally:
        if service_proc:
            stop_process(service_proc)


if __name__ == "__main__":
    main()
