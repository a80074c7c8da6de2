#!/usr/bin/env python
"""
Exercise a locally running screenshot service end to end.

Usage (from repo root, with the service listening on BASE_URL):
    python scripts/run_capture_smoke_test.py [entry|exit]

Writes the returned PNG next to this script. Only intended for a local dev
server; it needs a real browser and a reachable SAE-RADAR instance.
"""

import base64
import os
import sys
from pathlib import Path

import httpx

BASE_URL = os.getenv("SCREENSHOT_BASE_URL", "http://localhost:3001")
AUTH_TOKEN = os.getenv("AUTH_TOKEN", "")
OUTPUT_DIR = Path(__file__).resolve().parent

ENTRY_PAYLOAD = {
    "flightId": "AE5F12",
    "callsign": "BAT91",
    "lat": 18.5,
    "lon": -69.9,
    "alt": 12000,
    "speed": 310,
    "heading": 0,
    "origin": "MDSD",
    "destination": "TJSJ",
    "mode": "entry",
}


def build_exit_payload() -> dict:
    """A 3-minute crossing with a trail long enough to be downsampled."""

    trail = [
        {"lat": 18.0 + i * 0.004, "lon": -70.5 + i * 0.006, "alt": 9000 + i * 10}
        for i in range(250)
    ]
    return {
        "callsign": "BAT91",
        "mode": "exit",
        "duration": "3min",
        "detections": len(trail),
        "avgAltitude": 10250,
        "minAltitude": 9000,
        "maxAltitude": 11490,
        "avgSpeed": 305,
        "maxSpeed": 330,
        "zoneName": "Santo Domingo FIR",
        "waypoints": trail,
    }


def check_server_health(client: httpx.Client) -> None:
    """Ensure the service is up and has a browser before capturing."""

    url = f"{BASE_URL}/health"
    print(f"Checking service health at {url} ...")
    try:
        resp = client.get(url, timeout=5)
    except httpx.RequestError as exc:
        raise SystemExit(f"ERROR: The service is probably not running. Failed to reach {url}: {exc}")

    payload = resp.json()
    if resp.status_code != 200 or payload.get("status") != "ok":
        raise SystemExit(f"ERROR: unexpected /health response {resp.status_code}: {payload}")

    print(f"Health check OK (engine: {payload.get('engine')}).\n")


def main() -> None:
    mode = sys.argv[1] if len(sys.argv) > 1 else "entry"
    payload = build_exit_payload() if mode == "exit" else ENTRY_PAYLOAD
    headers = {"Authorization": f"Bearer {AUTH_TOKEN}"} if AUTH_TOKEN else {}

    with httpx.Client() as client:
        check_server_health(client)

        print(f"Requesting {mode} screenshot ...")
        resp = client.post(f"{BASE_URL}/screenshot", json=payload, headers=headers, timeout=120)
        body = resp.json()

    if not body.get("success"):
        raise SystemExit(f"ERROR: capture failed ({resp.status_code}): {body}")

    out_path = OUTPUT_DIR / f"smoke_{mode}.png"
    out_path.write_bytes(base64.b64decode(body["image"]))
    print(
        f"Saved {out_path} in {body['elapsed']}ms "
        f"(flight={body['flight']}, waypoints={body['waypointCount']}, ready={body['ready']}, "
        f"warnings={body['warnings']})"
    )


if __name__ == "__main__":
    main()
