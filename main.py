#!/usr/bin/env python3
import logging
import os

import uvicorn

from esreport.app import create_app

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()


if __name__ == "__main__":
    reload_enabled = os.getenv("ESREPORT_DEV_MODE", "false").lower() == "true"
    uvicorn.run("main:app", host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")), reload=reload_enabled)
