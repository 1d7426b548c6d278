# producer.py
import os
import time
import uuid
import random
import argparse
from datetime import datetime, timezone

import httpx


def build_client(base_url: str) -> httpx.Client:
    return httpx.Client(base_url=base_url.rstrip("/"), timeout=10.0)


def iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def make_event(i: int) -> dict:
    # Randomized, IID event payload
    user_id = random.randint(1, 10_000)
    device = random.choice(["ios", "android", "web", "backend"])
    action = random.choice(["view", "click", "checkout", "create", "update"])
    amount = round(random.lognormvariate(2.0, 0.8), 2)
    return {
        "iid": str(uuid.uuid4()),
        "seq": i,                           # local monotonic sequence
        "ts": iso_now(),
        "actor": {"user_id": user_id, "device": device},
        "event": {"name": action, "amount": amount},
    }


def produce(client: httpx.Client, topic: str, payload) -> int:
    r = client.post(f"/topics/{topic}/produce", json={"payload": payload})
    r.raise_for_status()
    return r.json()["offset"]


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--base-url", default=os.getenv("STREAMS_API", "http://localhost:8000"))
    ap.add_argument("--topic", default=os.getenv("TOPIC", "test-topic"))
    ap.add_argument("--per-minute", type=float, default=120.0,
                    help="Target average events per minute (Poisson arrivals).")
    ap.add_argument("--count", type=int, default=0, help="Stop after N events (0 = run forever).")
    ap.add_argument("--quiet", action="store_true", help="Reduce console logging.")
    args = ap.parse_args()

    if args.per_minute <= 0:
        raise SystemExit("--per-minute must be > 0")
    rate = args.per_minute / 60.0

    client = build_client(args.base_url)
    i = 0
    try:
        while not args.count or i < args.count:
            time.sleep(random.expovariate(rate))  # mean 1/rate
            try:
                offset = produce(client, args.topic, make_event(i))
            except httpx.HTTPStatusError as e:
                problem = e.response.json() if e.response.headers.get("content-type", "").endswith("json") else {}
                # offset_consumed=true means a hole was left; a new produce gets a new offset
                if not args.quiet:
                    print(f"[warn] produce failed ({e.response.status_code}): {problem.get('title')} "
                          f"offset_consumed={problem.get('offset_consumed')}")
                time.sleep(0.5)
                continue
            except httpx.TransportError as e:
                if not args.quiet:
                    print(f"[warn] transport error: {e}; retrying after short backoff")
                time.sleep(0.5)
                continue
            if not args.quiet:
                print(f"{args.topic} o{offset} seq={i}")
            i += 1
    except KeyboardInterrupt:
        pass
    finally:
        client.close()
        if not args.quiet:
            print(f"[done] sent {i} events")


if __name__ == "__main__":
    main()
