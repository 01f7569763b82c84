from http.server import BaseHTTPRequestHandler
import os
import sys


# Ensure project root is on path so we can import the extractor
PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
if PROJECT_ROOT not in sys.path:
    sys.path.append(PROJECT_ROOT)

from html_to_block_json.service import encode_body, handle_page_request, json_response  # noqa: E402


class handler(BaseHTTPRequestHandler):
    def do_GET(self):
        self._send(handle_page_request(self.path))

    def do_POST(self):
        self._send(json_response({"error": "Use GET /<org>/<site>/<path>."}, status=405))

    def _send(self, response):
        body = encode_body(response)
        self.send_response(response.status)
        self.send_header("Content-Type", response.content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)
