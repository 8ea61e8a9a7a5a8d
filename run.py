#!/usr/bin/env python3

"""
Command line client for the Outliers server.

Sends a batch of metrics to Detect and prints the outlier indices. Without
``--input`` it sends a generated demo batch: uniform noise in [0, 40) with
three spikes injected at positions 7, 113 and 835.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import argparse
import asyncio
import csv
import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np

from api.requests import Metric
from client import OutliersClient, OutliersError
from config import settings

log = logging.getLogger("run")

DEMO_SIZE = 1000
DEMO_LOW = 0.0
DEMO_HIGH = 40.0
DEMO_SPIKES: Dict[int, float] = {7: 97.0, 113: 92.0, 835: 93.0}


def demo_metrics(
    size: int = DEMO_SIZE,
    seed: Optional[int] = None,
    name: str = "CPU",
    start: Optional[datetime] = None,
) -> List[Metric]:
    rng = np.random.default_rng(seed)
    values = rng.uniform(DEMO_LOW, DEMO_HIGH, size)
    for idx, spike in DEMO_SPIKES.items():
        if idx < size:
            values[idx] = spike

    start = start or datetime.now(timezone.utc)
    return [
        Metric(time=start + timedelta(milliseconds=i), name=name, value=float(v))
        for i, v in enumerate(values)
    ]


def _parse_time(raw: str) -> datetime:
    try:
        seconds = float(raw)
    except ValueError:
        return datetime.fromisoformat(raw)
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def load_metrics(path: Path) -> List[Metric]:
    """Read ``time,name,value`` rows; ``time`` is ISO 8601 or epoch seconds.

    Raises ``ValueError`` naming the offending line when a row cannot be read.
    """
    metrics: List[Metric] = []
    with path.open(newline="", encoding="utf-8") as fh:
        for line, row in enumerate(csv.DictReader(fh), start=2):
            try:
                when = _parse_time((row.get("time") or "").strip())
                metrics.append(Metric(time=when, name=row.get("name") or "", value=float(row["value"])))
            except (KeyError, TypeError, ValueError, OverflowError, OSError) as e:
                raise ValueError(f"{path}:{line}: invalid metric row: {e!r}") from e
    return metrics


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Detect outliers with a running Outliers server")
    parser.add_argument("--server-url", default=settings.server_url, help="Outliers server URL")
    parser.add_argument("--timeout", type=float, default=settings.client_timeout, help="Call deadline (seconds)")
    parser.add_argument("--input", type=Path, default=None, help="CSV file with time,name,value columns")
    parser.add_argument("--size", type=int, default=DEMO_SIZE, help="Demo batch size")
    parser.add_argument("--seed", type=int, default=None, help="Demo random seed")
    parser.add_argument("--name", default="CPU", help="Demo metric name")
    parser.add_argument("--retries", type=int, default=settings.client_retry_attempts, help="Connection attempts")
    args = parser.parse_args(argv)
    if args.size < 0:
        parser.error("--size must be >= 0")
    if args.timeout <= 0:
        parser.error("--timeout must be > 0")
    return args


async def run(args: argparse.Namespace) -> List[int]:
    if args.input is not None:
        metrics = load_metrics(args.input)
    else:
        metrics = demo_metrics(args.size, args.seed, args.name)

    async with OutliersClient(
        base_url=args.server_url,
        timeout=args.timeout,
        retry_attempts=args.retries,
    ) as client:
        return await client.detect(metrics)


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )
    args = _parse_args(argv)
    try:
        indices = asyncio.run(run(args))
    except OutliersError as exc:
        log.error("detect failed: %s", exc)
        return 1
    except (OSError, ValueError) as exc:
        log.error("cannot read metrics: %s", exc)
        return 1

    print(f"outliers at: {indices}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
