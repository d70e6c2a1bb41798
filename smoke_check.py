"""
Smoke check against a running deployment.

    python smoke_check.py                      # localhost, default ports
    SMOKE_HOST=10.0.0.5 PORT_APP=5000 python smoke_check.py
"""

import json
import os
import sys

import requests

HOST = os.getenv("SMOKE_HOST", "localhost")
MAIN_URL = f"http://{HOST}:{os.getenv('PORT', '8080')}"
APP_URL = f"http://{HOST}:{os.getenv('PORT_APP', '4242')}"

CHECKS = [
    (MAIN_URL, "/"),
    (MAIN_URL, "/health"),
    (APP_URL, "/"),
    (APP_URL, "/health"),
    (APP_URL, "/public"),
    (APP_URL, "/private"),
]

failures = 0
for base_url, path in CHECKS:
    print(f"\nTesting {base_url}{path} ...")
    try:
        response = requests.get(f"{base_url}{path}", timeout=5)
        print(f"Status: {response.status_code}")
        if response.headers.get("content-type", "").startswith("application/json"):
            print(f"Response: {json.dumps(response.json(), indent=2)}")
        else:
            print(f"Response: {response.text}")
        if response.status_code != 200:
            failures += 1
    except requests.RequestException as e:
        print(f"Error: {e}")
        failures += 1

print(f"\n\nDone! {len(CHECKS) - failures}/{len(CHECKS)} endpoints OK")
sys.exit(1 if failures else 0)
