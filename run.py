#!/usr/bin/env python3
"""
Start the cardpt HTTP server.

    python run.py --port 9000 --reload
"""

import argparse
import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Serve the cardpt engine and decision gateway")
    parser.add_argument("--host", default="0.0.0.0", help="interface to listen on")
    parser.add_argument("--port", type=int, default=8000, help="TCP port")
    parser.add_argument("--reload", action="store_true", help="restart on source changes")
    parser.add_argument("--log-level", default="info", help="uvicorn log level")
    opts = parser.parse_args()

    uvicorn.run(
        "cardpt.server.app:app",
        host=opts.host,
        port=opts.port,
        reload=opts.reload,
        log_level=opts.log_level,
    )


if __name__ == "__main__":
    main()
