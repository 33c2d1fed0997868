#!/usr/bin/env python3
"""
Development script to run the dashdeck console locally.

Starts the FastAPI application with uvicorn in development mode
with hot reloading.
"""

import os
import uvicorn


def main():
    """Run the FastAPI application in development mode."""
    os.environ.setdefault("DASHDECK_EXT_DIRS", "extensions")
    os.environ.setdefault("DASHDECK_LOG_LEVEL", "DEBUG")

    print("Starting dashdeck console")
    print(f"   Extensions: {os.environ.get('DASHDECK_EXT_DIRS')}")
    print("   Documentation: http://localhost:8080/docs")
    print("   Views: http://localhost:8080/views")
    print()

    uvicorn.run(
        "dashdeck.api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8080,
        reload=True,
        log_level="info",
        reload_dirs=["dashdeck", "extensions"],
    )


if __name__ == "__main__":
    main()
