"""
Constants and configuration for the Outliers service.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import os

from pydantic_settings import BaseSettings


OUTLIERS_HOST = os.getenv("OUTLIERS_HOST", "0.0.0.0")
OUTLIERS_PORT = int(os.getenv("OUTLIERS_PORT", "9999"))
OUTLIERS_SERVER_URL = os.getenv("OUTLIERS_SERVER_URL", "http://127.0.0.1:9999").rstrip("/")

OUTLIERS_CLIENT_TIMEOUT = float(os.getenv("OUTLIERS_CLIENT_TIMEOUT", "30"))

# default multiplier of the population standard deviation
DEFAULT_THRESHOLD_SIGMA = 2.0

CONTENT_TYPE_PROTOBUF = "application/x-protobuf"
CONTENT_TYPE_JSON = "application/json"
SUPPORTED_CONTENT_TYPES = (CONTENT_TYPE_PROTOBUF, CONTENT_TYPE_JSON)

HEALTH_PATH = "/health"


class Settings(BaseSettings):
    # server
    host: str = OUTLIERS_HOST
    port: int = OUTLIERS_PORT
    workers: int = 1
    log_level: str = "info"

    # detection
    outlier_threshold_sigma: float = DEFAULT_THRESHOLD_SIGMA

    # dispatch limits
    max_concurrency: int = 8
    max_request_bytes: int = 16 * 1024 * 1024

    # client
    server_url: str = OUTLIERS_SERVER_URL
    client_timeout: float = OUTLIERS_CLIENT_TIMEOUT
    # 1 means a single attempt, connection failures are not retried
    client_retry_attempts: int = 1
    client_retry_delay: float = 0.5
    client_retry_backoff: float = 2.0

    model_config = {
        "env_prefix": "OUTLIERS_",
        "extra": "ignore",
    }


settings = Settings()
