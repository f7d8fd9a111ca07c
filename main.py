#!/usr/bin/env python3
"""
Entry point for the Tour Booking API.
"""

import uvicorn

from tourbooking.config import API_HOST, API_PORT, API_RELOAD, LOG_LEVEL

if __name__ == "__main__":
    uvicorn.run(
        "tourbooking.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_RELOAD,
        log_level=LOG_LEVEL.lower(),
    )
