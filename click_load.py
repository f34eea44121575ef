"""
click_load.py — async load script firing link clicks at a running API

Usage:
  python click_load.py --base http://127.0.0.1:8000 --links seeded_links.jsonl --count 5000 --concurrency 100

Every click is counted by the server (no dedupe), so after a run the sum of
the targeted links' clicks must have grown by exactly the number of
successful requests.
"""
import argparse
import asyncio
import json
import random
import time
from datetime import datetime, timezone

import httpx


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


def load_targets(path):
    targets = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            obj = json.loads(line)
            if obj.get("username") and obj.get("link_id"):
                targets.append((obj["username"], obj["link_id"]))
    return targets


async def _click_one(client: httpx.AsyncClient, base: str, username: str, link_id: str) -> bool:
    try:
        r = await client.post(f"{base}/api/links/{link_id}/click", json={"username": username}, timeout=10)
        return r.status_code == 200
    except httpx.HTTPError:
        return False


async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base", default="http://127.0.0.1:8000")
    parser.add_argument("--links", default="seeded_links.jsonl")
    parser.add_argument("--count", type=int, default=5000)
    parser.add_argument("--concurrency", type=int, default=100)
    args = parser.parse_args()

    targets = load_targets(args.links)
    if not targets:
        raise SystemExit(f"no targets in {args.links}; run seed_profiles.py first")

    start_iso = _now_iso()
    t0 = time.perf_counter()
    success = 0

    limit = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)
    async with httpx.AsyncClient(limits=limit) as client:
        sem = asyncio.Semaphore(args.concurrency)

        async def _task():
            nonlocal success
            username, link_id = random.choice(targets)
            async with sem:
                if await _click_one(client, args.base, username, link_id):
                    success += 1

        await asyncio.gather(*(_task() for _ in range(args.count)))

        stats = (await client.get(f"{args.base}/api/analytics/platform-stats")).json()

    dt = time.perf_counter() - t0
    print(f"START: {start_iso}")
    print(f"END:   {_now_iso()}")
    print(f"TOTAL: {dt:.3f} s")
    print(f"OPS:   clicks={args.count}, ok={success}, fail={args.count - success}")
    if dt > 0:
        print(f"TPS:   {success/dt:.1f} req/s")
    print(f"PLATFORM total_clicks now: {stats.get('stats', {}).get('total_clicks')}")


if __name__ == "__main__":
    asyncio.run(main())
