#!/usr/bin/env python3

"""
Script to perform concurrent stress testing of the Detect operation.

Every worker sends the same demo batch, so every successful reply must carry
the same indices; any divergence is reported.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import argparse
import asyncio
import statistics
import time
from collections import Counter
from dataclasses import dataclass
from typing import List, Optional, Tuple

from api.requests import OutliersRequest
from client import OutliersClient, OutliersError, RpcError
from config import settings
from run import demo_metrics


@dataclass(frozen=True)
class RunConfig:
    server_url: str
    concurrency: int
    requests: int
    timeout: float
    warmup: int
    size: int
    seed: int


# (latency ms, error label, indices)
Result = Tuple[float, Optional[str], Optional[Tuple[int, ...]]]


def _parse_args() -> RunConfig:
    parser = argparse.ArgumentParser(description="Concurrent stress test for Detect")
    parser.add_argument("--server-url", default=settings.server_url, help="Outliers server URL")
    parser.add_argument("--concurrency", type=int, default=8, help="Concurrent workers")
    parser.add_argument("--requests", type=int, default=200, help="Total measured requests")
    parser.add_argument("--timeout", type=float, default=30.0, help="Per-call deadline (seconds)")
    parser.add_argument("--warmup", type=int, default=5, help="Warmup requests (not measured)")
    parser.add_argument("--size", type=int, default=1000, help="Metrics per request")
    parser.add_argument("--seed", type=int, default=7, help="Demo batch random seed")

    args = parser.parse_args()

    if args.concurrency < 1:
        raise SystemExit("--concurrency must be >= 1")
    if args.requests < 1:
        raise SystemExit("--requests must be >= 1")
    if args.warmup < 0:
        raise SystemExit("--warmup must be >= 0")

    return RunConfig(
        server_url=args.server_url.rstrip("/"),
        concurrency=args.concurrency,
        requests=args.requests,
        timeout=args.timeout,
        warmup=args.warmup,
        size=args.size,
        seed=args.seed,
    )


def _percentile(sorted_values: List[float], p: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return sorted_values[0]
    rank = (len(sorted_values) - 1) * p
    lower = int(rank)
    upper = min(lower + 1, len(sorted_values) - 1)
    frac = rank - lower
    return sorted_values[lower] * (1.0 - frac) + sorted_values[upper] * frac


async def _one_request(client: OutliersClient, request: OutliersRequest) -> Result:
    t0 = time.perf_counter()
    try:
        indices = await client.detect(request)
    except RpcError as exc:
        return (time.perf_counter() - t0) * 1000.0, f"rpc:{exc.code}", None
    except OutliersError as exc:
        return (time.perf_counter() - t0) * 1000.0, f"transport:{type(exc).__name__}", None
    return (time.perf_counter() - t0) * 1000.0, None, tuple(indices)


async def _run_phase(client: OutliersClient, request: OutliersRequest, cfg: RunConfig, count: int) -> List[Result]:
    remaining = count
    lock = asyncio.Lock()
    results: List[Result] = []

    async def worker() -> None:
        nonlocal remaining
        while True:
            async with lock:
                if remaining <= 0:
                    return
                remaining -= 1
            results.append(await _one_request(client, request))

    workers = [asyncio.create_task(worker()) for _ in range(cfg.concurrency)]
    await asyncio.gather(*workers)
    return results


def _print_summary(cfg: RunConfig, elapsed_s: float, results: List[Result]) -> None:
    latencies = sorted(r[0] for r in results)
    errors = Counter(r[1] for r in results if r[1])
    replies = Counter(r[2] for r in results if r[2] is not None)
    success = sum(replies.values())
    rps = len(results) / elapsed_s if elapsed_s > 0 else 0.0

    print("\nStress test complete")
    print(f"target        : {cfg.server_url}")
    print(f"requests      : {len(results)}")
    print(f"concurrency   : {cfg.concurrency}")
    print(f"success       : {success}/{len(results)} ({(success/len(results))*100:.1f}%)")
    print(f"duration      : {elapsed_s:.3f}s")
    print(f"throughput    : {rps:.2f} req/s")
    print(f"latency avg   : {statistics.fmean(latencies):.2f} ms")
    print(f"latency p50   : {_percentile(latencies, 0.50):.2f} ms")
    print(f"latency p95   : {_percentile(latencies, 0.95):.2f} ms")
    print(f"latency p99   : {_percentile(latencies, 0.99):.2f} ms")
    if len(replies) == 1:
        print(f"outliers      : {list(next(iter(replies)))}")
    elif replies:
        print(f"DIVERGENT     : {len(replies)} distinct replies for one request")
    if errors:
        print(f"errors        : {dict(errors.most_common())}")


async def main() -> None:
    cfg = _parse_args()
    request = OutliersRequest(metrics=demo_metrics(cfg.size, cfg.seed))

    async with OutliersClient(base_url=cfg.server_url, timeout=cfg.timeout) as client:
        if cfg.warmup:
            print(f"Running warmup: {cfg.warmup} request(s)...")
            await _run_phase(client, request, cfg, cfg.warmup)

        print(f"Running measured phase: {cfg.requests} request(s), concurrency={cfg.concurrency}...")
        t0 = time.perf_counter()
        measured = await _run_phase(client, request, cfg, cfg.requests)
        elapsed = time.perf_counter() - t0

    _print_summary(cfg, elapsed, measured)


if __name__ == "__main__":
    asyncio.run(main())
