#!/usr/bin/env python3
"""
Fake SendGrid API server for local development and testing.

Implements the one endpoint reorder-bot uses:
- POST /v3/mail/send (accepts the message and prints it)

Recipients passed with --reject get a 400 response, to exercise the
fail-fast path without a real account.

Run with: python scripts/fake_sendgrid.py --port 9010
Then set in datasette.yaml:
    sendgrid:
      api_base: "http://127.0.0.1:9010/v3"
      api_key: "fake"
"""

import argparse
import json
from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import urlparse

REJECTED_RECIPIENTS: set[str] = set()


class FakeSendGridHandler(BaseHTTPRequestHandler):
    """HTTP handler implementing a fake mail/send endpoint."""

    def log_message(self, format: str, *args) -> None:  # noqa: A002
        """Override to add prefix."""
        print(f"[FakeSendGrid] {args[0]}")

    def send_json(self, data: dict, status: int = 200) -> None:
        """Send a JSON response."""
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.end_headers()
        self.wfile.write(json.dumps(data).encode())

    def send_error_json(self, status: int, message: str, field: str | None = None) -> None:
        """Send a SendGrid-style error response."""
        self.send_json(
            {"errors": [{"message": message, "field": field, "help": None}]},
            status=status,
        )

    def do_POST(self) -> None:
        """Handle POST requests."""
        path = urlparse(self.path).path

        content_length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(content_length).decode() if content_length > 0 else ""

        if path == "/v3/mail/send":
            self.handle_mail_send(body)
        else:
            self.send_error_json(404, f"Unknown endpoint: {path}")

    def handle_mail_send(self, body: str) -> None:
        """Accept a message, or reject it for configured recipients."""
        if not self.headers.get("Authorization", "").startswith("Bearer "):
            self.send_error_json(401, "The provided authorization grant is invalid")
            return

        try:
            data = json.loads(body)
        except json.JSONDecodeError:
            self.send_error_json(400, "Invalid JSON body")
            return

        recipients = [
            to["email"]
            for personalization in data.get("personalizations", [])
            for to in personalization.get("to", [])
        ]
        if not recipients:
            self.send_error_json(400, "The to array is required", field="personalizations")
            return

        for recipient in recipients:
            if recipient in REJECTED_RECIPIENTS:
                self.send_error_json(
                    400,
                    f"Does not contain a valid address: {recipient}",
                    field="personalizations.0.to",
                )
                return

        content = data.get("content", [{}])[0].get("value", "")
        print(f"--- To: {', '.join(recipients)}")
        print(f"--- Subject: {data.get('subject', '')}")
        print(content)
        print("---")

        # SendGrid answers 202 with an empty body
        self.send_response(202)
        self.end_headers()


def main() -> None:
    parser = argparse.ArgumentParser(description="Run fake SendGrid API server")
    parser.add_argument(
        "--port",
        type=int,
        default=9010,
        help="Port to listen on (default: 9010)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--reject",
        action="append",
        default=[],
        help="Recipient address to reject with HTTP 400 (repeatable)",
    )
    args = parser.parse_args()

    REJECTED_RECIPIENTS.update(args.reject)

    server = HTTPServer((args.host, args.port), FakeSendGridHandler)
    print(f"Fake SendGrid API running at http://{args.host}:{args.port}/v3")
    for address in sorted(REJECTED_RECIPIENTS):
        print(f"  Rejecting: {address}")
    print()

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nShutting down...")
        server.shutdown()


if __name__ == "__main__":
    main()
