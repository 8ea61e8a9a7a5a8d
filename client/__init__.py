"""
Client side of the Outliers Detect operation.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from client.exceptions import (
    CallCancelled,
    OutliersError,
    ResponseDecodeError,
    RpcError,
    ServiceUnavailable,
)
from client.outliers import OutliersClient, detect_outliers

__all__ = [
    "CallCancelled",
    "OutliersClient",
    "OutliersError",
    "ResponseDecodeError",
    "RpcError",
    "ServiceUnavailable",
    "detect_outliers",
]
