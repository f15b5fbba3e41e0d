"""CLI client for the community stream API.

Usage:
  community-cli health
  community-cli connect 0x742d35Cc6634C0532925a3b844Bc9e7595f6E456
  community-cli streams start <user-id> --rate 0.0001 --days 1
  community-cli post <user-id> "gm"
  community-cli watch <user-id> --messages 5
  community-cli poll --interval 5
"""
import argparse
import asyncio
import json
import sys
import time

import httpx
import websockets

RECONNECT_DELAY_SECONDS = 3.0


def print_json(data: object) -> None:
    print(json.dumps(data, indent=2, default=str))


def cmd_health(client: httpx.Client, _: argparse.Namespace) -> int:
    r = client.get("/")
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_connect(client: httpx.Client, args: argparse.Namespace) -> int:
    body = {"address": args.address, "signature": args.signature, "message": args.message}
    r = client.post("/api/auth/connect", json=body)
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_stats(client: httpx.Client, _: argparse.Namespace) -> int:
    r = client.get("/api/community/stats")
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_messages(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.get("/api/messages", params={"limit": args.limit})
    r.raise_for_status()
    data = r.json()["messages"]
    print(f"Found {len(data)} messages")
    print_json(data)
    return 0


def cmd_post(client: httpx.Client, args: argparse.Namespace) -> int:
    body = {"userId": args.user_id, "content": args.content, "messageType": args.type}
    r = client.post("/api/messages", json=body)
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_access(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.get(f"/api/verify-access/{args.user_id}")
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_streams_list(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.get(f"/api/streams/user/{args.user_id}")
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_streams_create(client: httpx.Client, args: argparse.Namespace) -> int:
    body = {
        "userId": args.user_id,
        "ratePerSecond": args.rate,
        "totalAmount": args.total,
        "paymentId": args.payment_id,
    }
    r = client.post("/api/streams", json=body)
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_streams_start(client: httpx.Client, args: argparse.Namespace) -> int:
    body = {"userId": args.user_id, "ratePerSecond": args.rate, "durationDays": args.days}
    r = client.post("/api/streams/start", json=body)
    r.raise_for_status()
    print_json(r.json())
    return 0


def _patch_stream(client: httpx.Client, stream_id: str, body: dict) -> int:
    r = client.patch(f"/api/streams/{stream_id}", json=body)
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_streams_pause(client: httpx.Client, args: argparse.Namespace) -> int:
    return _patch_stream(client, args.stream_id, {"isPaused": True})


def cmd_streams_resume(client: httpx.Client, args: argparse.Namespace) -> int:
    return _patch_stream(client, args.stream_id, {"isPaused": False})


def cmd_streams_progress(client: httpx.Client, args: argparse.Namespace) -> int:
    return _patch_stream(client, args.stream_id, {"streamedAmount": args.amount})


def cmd_streams_accrue(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.post(f"/api/streams/{args.stream_id}/accrue")
    r.raise_for_status()
    print_json(r.json())
    return 0


def _ws_url(base_url: str, user_id: str) -> str:
    scheme, _, rest = base_url.partition("://")
    ws_scheme = "wss" if scheme == "https" else "ws"
    return f"{ws_scheme}://{rest}/ws?userId={user_id}"


async def watch_feed(
    url: str,
    max_messages: int | None = None,
    send: str | None = None,
    reconnect_delay: float = RECONNECT_DELAY_SECONDS,
) -> int:
    """Print newMessage frames; reconnect after a fixed delay, without limit."""
    count = 0
    while True:
        try:
            async with websockets.connect(url) as ws:
                print(f"Connected to {url}", file=sys.stderr)
                if send:
                    await ws.send(json.dumps({"type": "sendMessage", "content": send}))
                    send = None
                async for raw in ws:
                    frame = json.loads(raw)
                    if frame.get("type") != "newMessage":
                        continue
                    count += 1
                    print_json(frame["message"])
                    if max_messages and count >= max_messages:
                        return count
        except (websockets.ConnectionClosed, OSError) as exc:
            print(f"Disconnected ({exc}); retrying in {reconnect_delay}s", file=sys.stderr)
            await asyncio.sleep(reconnect_delay)


def cmd_watch(_client: httpx.Client | None, args: argparse.Namespace) -> int:
    url = _ws_url(args.base_url.rstrip("/"), args.user_id)

    async def run_with_timeout() -> None:
        task = watch_feed(url, args.messages, args.send)
        if args.duration and args.duration > 0:
            try:
                await asyncio.wait_for(task, timeout=args.duration)
            except asyncio.TimeoutError:
                print(f"Stopped after {args.duration}s", file=sys.stderr)
        else:
            await task

    try:
        asyncio.run(run_with_timeout())
    except KeyboardInterrupt:
        print("\nStopped by user", file=sys.stderr)
        return 130
    return 0


def poll_feed(client: httpx.Client, limit: int, interval: float, rounds: int | None) -> int:
    """Poll GET /api/messages and print messages not seen before (oldest first)."""
    seen: set[str] = set()
    done = 0
    while rounds is None or done < rounds:
        r = client.get("/api/messages", params={"limit": limit})
        r.raise_for_status()
        for message in reversed(r.json()["messages"]):
            if message["id"] in seen:
                continue
            seen.add(message["id"])
            print_json(message)
        done += 1
        if rounds is None or done < rounds:
            time.sleep(interval)
    return len(seen)


def cmd_poll(client: httpx.Client, args: argparse.Namespace) -> int:
    try:
        poll_feed(client, args.limit, args.interval, args.rounds)
    except KeyboardInterrupt:
        print("\nStopped by user", file=sys.stderr)
        return 130
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Talk to the community stream API.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--base-url",
        default="http://localhost:8000",
        help="API base URL (default: http://localhost:8000)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Request timeout in seconds (default: 30)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command")

    subparsers.add_parser("health", help="GET / health check")

    p = subparsers.add_parser("connect", help="POST /api/auth/connect")
    p.add_argument("address", help="Wallet address")
    p.add_argument("--signature", default="unsigned", help="Wallet signature")
    p.add_argument("--message", default="Join the community", help="Signed message")

    subparsers.add_parser("stats", help="GET /api/community/stats")

    p = subparsers.add_parser("messages", help="GET /api/messages")
    p.add_argument("--limit", type=int, default=50, help="Max messages (default: 50)")

    p = subparsers.add_parser("post", help="POST /api/messages")
    p.add_argument("user_id", help="Author user ID")
    p.add_argument("content", help="Message text")
    p.add_argument("--type", choices=["user", "system", "announcement"], default="user")

    p = subparsers.add_parser("access", help="GET /api/verify-access/{userId}")
    p.add_argument("user_id", help="User ID")

    streams = subparsers.add_parser("streams", help="Stream routes (/api/streams)")
    streams_sub = streams.add_subparsers(dest="streams_cmd", required=True)
    p = streams_sub.add_parser("list", help="GET /api/streams/user/{userId}")
    p.add_argument("user_id", help="User ID")
    p = streams_sub.add_parser("create", help="POST /api/streams")
    p.add_argument("user_id", help="User ID")
    p.add_argument("--rate", required=True, help="USDC per second (e.g. 0.0001)")
    p.add_argument("--total", required=True, help="Committed total in USDC")
    p.add_argument("--payment-id", default=None, help="External payment ID")
    p = streams_sub.add_parser("start", help="POST /api/streams/start (pays first)")
    p.add_argument("user_id", help="User ID")
    p.add_argument("--rate", required=True, help="USDC per second")
    p.add_argument("--days", type=float, default=30, help="Duration in days (default: 30)")
    for name, help_text in [
        ("pause", "PATCH isPaused=true"),
        ("resume", "PATCH isPaused=false"),
        ("accrue", "POST /api/streams/{id}/accrue"),
    ]:
        p = streams_sub.add_parser(name, help=help_text)
        p.add_argument("stream_id", help="Stream ID")
    p = streams_sub.add_parser("progress", help="PATCH streamedAmount")
    p.add_argument("stream_id", help="Stream ID")
    p.add_argument("amount", help="Streamed amount in USDC")

    p = subparsers.add_parser("watch", help="Follow the feed over WebSocket (push)")
    p.add_argument("user_id", help="User ID to connect as")
    p.add_argument("--send", default=None, help="Send this message once connected")
    p.add_argument("--duration", type=float, default=None, metavar="SECS",
                   help="Stop after SECS seconds (default: run until Ctrl+C)")
    p.add_argument("--messages", type=int, default=None, metavar="N",
                   help="Stop after N messages (default: no limit)")

    p = subparsers.add_parser("poll", help="Follow the feed by polling (pull)")
    p.add_argument("--limit", type=int, default=30, help="Messages per poll (default: 30)")
    p.add_argument("--interval", type=float, default=5.0, help="Seconds between polls (default: 5)")
    p.add_argument("--rounds", type=int, default=None, help="Stop after N polls")
    return parser


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    base_url = args.base_url.rstrip("/")

    handlers = {
        "health": cmd_health,
        "connect": cmd_connect,
        "stats": cmd_stats,
        "messages": cmd_messages,
        "post": cmd_post,
        "access": cmd_access,
        "poll": cmd_poll,
        "streams": {
            "list": cmd_streams_list,
            "create": cmd_streams_create,
            "start": cmd_streams_start,
            "pause": cmd_streams_pause,
            "resume": cmd_streams_resume,
            "progress": cmd_streams_progress,
            "accrue": cmd_streams_accrue,
        },
    }

    cmd = args.command
    if cmd == "watch":
        try:
            return cmd_watch(None, args)
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
    if cmd == "streams":
        handler = handlers["streams"][args.streams_cmd]
    else:
        handler = handlers[cmd]

    try:
        with httpx.Client(base_url=base_url, timeout=args.timeout) as client:
            return handler(client, args)
    except httpx.HTTPStatusError as e:
        print(f"HTTP error: {e.response.status_code}", file=sys.stderr)
        if e.response.content:
            try:
                print(e.response.json(), file=sys.stderr)
            except Exception:
                print(e.response.text, file=sys.stderr)
        return 1
    except httpx.RequestError as e:
        print(f"Request error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
