"""
Centralized exception handling decorator for RPC route functions.

The :func:`handle_exceptions` decorator wraps an endpoint handler, catching any
uncaught exceptions and converting them into :class:`api.errors.InternalError`.
Errors that are already part of the RPC error taxonomy (decode failures,
oversized or unsupported payloads) are propagated untouched, preserving their
status codes and detail messages. Anything else is logged with its traceback
and replaced by a generic internal error so that no internal state leaks to the
caller.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import inspect
import logging
from functools import wraps
from typing import Any, Callable, TypeVar, cast

from api.errors import InternalError, RpcServerError

F = TypeVar("F", bound=Callable[..., Any])

log = logging.getLogger(__name__)

_INTERNAL_DETAIL = "unexpected error while detecting outliers"


def handle_exceptions(func: F) -> F:
    """Decorator that converts uncaught exceptions to :class:`InternalError`.

    * If the wrapped function raises :class:`RpcServerError`, it is re-raised
      verbatim.
    * Any other exception is logged and transformed into
      ``InternalError(detail=_INTERNAL_DETAIL)``.

    The decorator works with both regular and async functions.
    """

    if inspect.iscoroutinefunction(func):
        @wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except RpcServerError:
                raise
            except Exception as exc:
                log.exception("%s failed", func.__name__)
                raise InternalError(_INTERNAL_DETAIL) from exc

        return cast(F, async_wrapper)

    @wraps(func)
    def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except RpcServerError:
            raise
        except Exception as exc:
            log.exception("%s failed", func.__name__)
            raise InternalError(_INTERNAL_DETAIL) from exc

    return cast(F, sync_wrapper)
