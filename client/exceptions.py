# client/exceptions.py

from typing import Optional


class OutliersError(Exception):
    pass


class ServiceUnavailable(OutliersError):
    pass


class CallCancelled(OutliersError):
    pass


class ResponseDecodeError(OutliersError):
    pass


class RpcError(OutliersError):
    def __init__(self, code: str, detail: str, status_code: Optional[int] = None):
        super().__init__(f"{code}: {detail}")
        self.code = code
        self.detail = detail
        self.status_code = status_code
