"""Module entrypoint.

Allows:
    python -m mcp_perf_log_server
"""

from __future__ import annotations

from mcp_perf_log_server.server.log_server import main

if __name__ == "__main__":
    main()
