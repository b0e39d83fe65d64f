"""CLI to exercise the Nakshatra Talks API against a running server.

Usage:
  poetry run nakshatra-cli health
  poetry run nakshatra-cli --token $TOKEN wallet balance
  poetry run nakshatra-cli --token $TOKEN wallet recharge 500 --payment-id pay_123
  poetry run nakshatra-cli --token $TOKEN session validate <astrologer-id> --type call
  poetry run nakshatra-cli --token $TOKEN session start <astrologer-id> --type chat
  poetry run nakshatra-cli --token $TOKEN session end <session-id>
  poetry run nakshatra-cli --token $TOKEN session rate <session-id> 5 --review "Very helpful"
"""
import argparse
import json
import os
import sys

import httpx


def print_json(data: object) -> None:
    print(json.dumps(data, indent=2, default=str, ensure_ascii=False))


def _print_response(r: httpx.Response) -> int:
    r.raise_for_status()
    print_json(r.json())
    return 0


def cmd_health(client: httpx.Client, _: argparse.Namespace) -> int:
    return _print_response(client.get("/health"))


def cmd_me(client: httpx.Client, _: argparse.Namespace) -> int:
    return _print_response(client.get("/auth/me"))


def cmd_wallet_balance(client: httpx.Client, _: argparse.Namespace) -> int:
    return _print_response(client.get("/api/v1/wallet/balance"))


def cmd_wallet_recharge(client: httpx.Client, args: argparse.Namespace) -> int:
    body = {
        "amount": args.amount,
        "paymentMethod": args.payment_method,
        "paymentId": args.payment_id,
    }
    return _print_response(client.post("/api/v1/wallet/recharge", json=body))


def cmd_wallet_transactions(client: httpx.Client, args: argparse.Namespace) -> int:
    params: dict[str, str | int] = {"page": args.page, "limit": args.limit}
    if args.type:
        params["type"] = args.type
    r = client.get("/api/v1/wallet/transactions", params=params)
    r.raise_for_status()
    data = r.json()
    pagination = data.get("pagination", {})
    print(f"Page {pagination.get('currentPage')}/{pagination.get('totalPages')}, "
          f"{pagination.get('totalItems')} transactions")
    print_json(data.get("data", []))
    return 0


def cmd_session_validate(client: httpx.Client, args: argparse.Namespace) -> int:
    body = {"astrologerId": args.astrologer_id, "sessionType": args.type}
    return _print_response(client.post("/api/v1/chat/validate-balance", json=body))


def cmd_session_start(client: httpx.Client, args: argparse.Namespace) -> int:
    body = {"astrologerId": args.astrologer_id, "sessionType": args.type}
    return _print_response(client.post("/api/v1/chat/sessions", json=body))


def cmd_session_active(client: httpx.Client, _: argparse.Namespace) -> int:
    return _print_response(client.get("/api/v1/chat/sessions/active"))


def cmd_session_end(client: httpx.Client, args: argparse.Namespace) -> int:
    body = {"endReason": args.reason} if args.reason else {}
    return _print_response(client.post(f"/api/v1/chat/sessions/{args.session_id}/end", json=body))


def cmd_session_rate(client: httpx.Client, args: argparse.Namespace) -> int:
    body: dict[str, object] = {"rating": args.rating}
    if args.review:
        body["review"] = args.review
    return _print_response(client.post(f"/api/v1/chat/sessions/{args.session_id}/rating", json=body))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Exercise the Nakshatra Talks API.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--base-url",
        default=os.getenv("NAKSHATRA_API_URL", "http://localhost:8000"),
        help="API base URL (default: http://localhost:8000)",
    )
    parser.add_argument(
        "--token",
        default=os.getenv("NAKSHATRA_TOKEN"),
        help="Bearer access token (default: $NAKSHATRA_TOKEN)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Request timeout in seconds (default: 30)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command")

    subparsers.add_parser("health", help="GET /health")
    subparsers.add_parser("me", help="GET /auth/me")

    # wallet
    wallet = subparsers.add_parser("wallet", help="Wallet routes (/api/v1/wallet)")
    wallet_sub = wallet.add_subparsers(dest="wallet_cmd", required=True)
    wallet_sub.add_parser("balance", help="GET /api/v1/wallet/balance")
    p = wallet_sub.add_parser("recharge", help="POST /api/v1/wallet/recharge")
    p.add_argument("amount", type=float, help="Amount to credit")
    p.add_argument("--payment-method", default="upi", help="Payment method (default: upi)")
    p.add_argument("--payment-id", required=True, help="Gateway payment reference")
    p = wallet_sub.add_parser("transactions", help="GET /api/v1/wallet/transactions")
    p.add_argument("--page", type=int, default=1)
    p.add_argument("--limit", type=int, default=20)
    p.add_argument("--type", choices=["recharge", "debit", "refund"], default=None)

    # sessions
    session = subparsers.add_parser("session", help="Session routes (/api/v1/chat)")
    session_sub = session.add_subparsers(dest="session_cmd", required=True)
    for name, help_text in [
        ("validate", "POST /api/v1/chat/validate-balance"),
        ("start", "POST /api/v1/chat/sessions"),
    ]:
        p = session_sub.add_parser(name, help=help_text)
        p.add_argument("astrologer_id", help="Astrologer UUID")
        p.add_argument("--type", choices=["chat", "call", "video"], default="chat")
    session_sub.add_parser("active", help="GET /api/v1/chat/sessions/active")
    p = session_sub.add_parser("end", help="POST /api/v1/chat/sessions/{id}/end")
    p.add_argument("session_id", help="Session UUID")
    p.add_argument(
        "--reason",
        choices=["user_ended", "astrologer_ended", "timeout", "insufficient_balance"],
        default=None,
    )
    p = session_sub.add_parser("rate", help="POST /api/v1/chat/sessions/{id}/rating")
    p.add_argument("session_id", help="Session UUID")
    p.add_argument("rating", type=int, choices=range(1, 6), help="1-5")
    p.add_argument("--review", default=None)
    return parser


HANDLERS = {
    "health": cmd_health,
    "me": cmd_me,
    "wallet": {
        "balance": cmd_wallet_balance,
        "recharge": cmd_wallet_recharge,
        "transactions": cmd_wallet_transactions,
    },
    "session": {
        "validate": cmd_session_validate,
        "start": cmd_session_start,
        "active": cmd_session_active,
        "end": cmd_session_end,
        "rate": cmd_session_rate,
    },
}


def resolve_handler(args: argparse.Namespace):
    entry = HANDLERS[args.command]
    if callable(entry):
        return entry
    return entry[getattr(args, f"{args.command}_cmd")]


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    handler = resolve_handler(args)

    headers = {"Authorization": f"Bearer {args.token}"} if args.token else {}
    try:
        with httpx.Client(
            base_url=args.base_url.rstrip("/"), headers=headers, timeout=args.timeout
        ) as client:
            return handler(client, args)
    except httpx.HTTPStatusError as e:
        print(f"HTTP error: {e.response.status_code}", file=sys.stderr)
        if e.response.content:
            try:
                print_json(e.response.json())
            except ValueError:
                print(e.response.text, file=sys.stderr)
        return 1
    except httpx.RequestError as e:
        print(f"Request error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
