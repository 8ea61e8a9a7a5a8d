"""
Entry point for the Outliers detection server.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api import contract
from api.errors import RpcServerError
from api.routes import router
from config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    stream=sys.stdout,
)
log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    log.info(
        "serving %s on %s:%d (threshold_sigma=%.2f, max_concurrency=%d)",
        contract.DETECT_PATH,
        settings.host,
        settings.port,
        settings.outlier_threshold_sigma,
        settings.max_concurrency,
    )
    yield
    log.info("server shutting down")


app = FastAPI(
    title="Outliers",
    description="Stateless outlier detection over ordered metric samples.",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router)


@app.exception_handler(RpcServerError)
async def handle_rpc_error(_request: Request, exc: RpcServerError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("detect failed: %s", exc.detail)
    else:
        log.warning("detect rejected (%s): %s", exc.code, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        workers=settings.workers,
        log_level=settings.log_level,
        access_log=True,
    )
