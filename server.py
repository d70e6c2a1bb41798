"""
server.py — Entry Point
=======================
Run both servers with:

    python server.py

Main server:        PORT          (default 8080)  →  /, /health
Application server: PORT_APP      (default 4242)  →  /, /health, /public, /private
Both bind to:       BIND_ADDRESS  (default 0.0.0.0)

Settings can also come from a .env file in the working directory.
"""

import sys

from simple_api.main import main

if __name__ == "__main__":
    sys.exit(main())
