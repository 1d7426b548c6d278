# consumer.py
import os
import json
import time
import signal
import argparse

import httpx

_running = True
def _stop(*_):
    global _running
    _running = False


def poll(client: httpx.Client, topic: str, offset: int, limit: int) -> dict:
    r = client.get(f"/topics/{topic}/consume", params={"offset": offset, "limit": limit})
    r.raise_for_status()
    return r.json()


def main():
    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)

    ap = argparse.ArgumentParser()
    ap.add_argument("--base-url", default=os.getenv("STREAMS_API", "http://localhost:8000"))
    ap.add_argument("--topic", default=os.getenv("TOPIC", "test-topic"))
    ap.add_argument("--offset", type=int, default=1, help="Offset to start reading from.")
    ap.add_argument("--limit", type=int, default=100)
    ap.add_argument("--idle-sec", type=float, default=1.0, help="Sleep after an empty read.")
    args = ap.parse_args()

    # The cursor lives here, not on the server
    offset = args.offset
    print(f"Consuming {args.topic} from offset {offset}… Ctrl+C to stop")

    with httpx.Client(base_url=args.base_url.rstrip("/"), timeout=10.0) as client:
        while _running:
            try:
                batch = poll(client, args.topic, offset, args.limit)
            except httpx.HTTPError as e:
                print(f"[warn] consume failed: {e}")
                time.sleep(args.idle_sec)
                continue

            for m in batch["messages"]:
                print(f"{args.topic} o{m['offset']} ts={m['timestamp']} payload={json.dumps(m['payload'])}")

            if batch["next_offset"] == offset:
                time.sleep(args.idle_sec)
            offset = batch["next_offset"]

    print(f"[done] next offset {offset}")

if __name__ == "__main__":
    main()
