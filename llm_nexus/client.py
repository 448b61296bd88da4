"""
Command-line client for the gateway HTTP API.

Usage:
    python -m llm_nexus.client --register alice
    python -m llm_nexus.client --prompt "Hello" --provider openai --user-id <id>
"""

import argparse
import sys

import httpx

from llm_nexus.core.config.constants import HEADER_REQUEST_ID

DEFAULT_ADDR = "http://localhost:8080"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="llm_nexus.client", description="LLM Nexus Gateway client")
    parser.add_argument("--addr", default=DEFAULT_ADDR, help="Gateway base URL")
    parser.add_argument("--base-path", default="/api", help="API prefix on the gateway")
    parser.add_argument("--prompt", help="Prompt to send")
    parser.add_argument("--provider", default="", help="Backend name (default order when empty)")
    parser.add_argument("--user-id", default=None, help="Registered requester id")
    parser.add_argument("--register", metavar="NAME", help="Register a requester and print its id")
    parser.add_argument("--temperature", type=float, default=None)
    parser.add_argument("--max-tokens", type=int, default=None)
    parser.add_argument("--timeout", type=float, default=60.0, help="HTTP timeout in seconds")
    return parser


def _fail(response: httpx.Response) -> int:
    try:
        body = response.json()
        message = f"{body.get('error')}: {body.get('message')}"
    except ValueError:
        message = response.text
    print(f"Error {response.status_code}: {message}", file=sys.stderr)
    request_id = response.headers.get(HEADER_REQUEST_ID)
    if request_id:
        print(f"Request ID: {request_id}", file=sys.stderr)
    return 1


def register(client: httpx.Client, base_path: str, name: str) -> int:
    response = client.post(f"{base_path}/users", json={"name": name})
    if response.status_code != 201:
        return _fail(response)
    user = response.json()
    print(f"Registered user {user['name']} with ID {user['id']}")
    return 0


def generate(client: httpx.Client, base_path: str, args: argparse.Namespace) -> int:
    payload = {"prompt": args.prompt, "provider": args.provider or None, "user_id": args.user_id}
    if args.temperature is not None:
        payload["temperature"] = args.temperature
    if args.max_tokens is not None:
        payload["max_tokens"] = args.max_tokens

    response = client.post(f"{base_path}/generate", json=payload)
    if response.status_code != 200:
        return _fail(response)

    body = response.json()
    print(f"Provider used: {body['provider_used']}")
    print(f"Processing time: {body['processing_time_ms']:.2f} ms")
    usage = body.get("usage")
    if usage:
        print(
            f"Tokens: {usage['prompt_tokens']} prompt + {usage['completion_tokens']} completion"
            f" = {usage['total_tokens']} (${usage['cost_usd']:.6f})"
        )
    print()
    print(body["content"])
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if not args.register and not args.prompt:
        print("one of --prompt or --register is required", file=sys.stderr)
        return 2

    base_path = "/" + args.base_path.strip("/") if args.base_path.strip("/") else ""

    try:
        with httpx.Client(base_url=args.addr, timeout=args.timeout) as client:
            if args.register:
                status = register(client, base_path, args.register)
                if status or not args.prompt:
                    return status
            return generate(client, base_path, args)
    except httpx.HTTPError as e:
        print(f"Could not reach gateway at {args.addr}: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
