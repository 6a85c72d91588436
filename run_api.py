#!/usr/bin/env python3
"""
Script to run the Books API server.
"""

import uvicorn

from api.config import config


def main():
    """Run the API server."""
    print("🚀 Starting Books API Server")
    print(f"📡 Host: {config.host}")
    print(f"🔌 Port: {config.port}")
    print(f"🌐 Debug: {config.debug}")
    print(f"📚 Server running on {config.server_url()}")
    print(f"📖 Swagger docs available at {config.docs_url()}")
    print("=" * 50)

    uvicorn.run(
        "api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower(),
        access_log=True
    )


if __name__ == "__main__":
    main()
