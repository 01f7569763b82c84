from http.server import BaseHTTPRequestHandler, HTTPServer
import os

from html_to_block_json.service import (
    Response,
    encode_body,
    handle_extract_request,
    handle_page_request,
    json_response,
)


class DevHandler(BaseHTTPRequestHandler):
    def _set_headers(self, status=200, content_type="application/json; charset=utf-8", length=None):
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        if length is not None:
            self.send_header("Content-Length", str(length))
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Methods", "GET, POST, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.end_headers()

    def _send(self, response: Response):
        body = encode_body(response)
        self._set_headers(response.status, response.content_type, len(body))
        self.wfile.write(body)

    def _read_html(self):
        content_length = int(self.headers.get("Content-Length", "0"))
        if content_length <= 0:
            return None
        raw_body = self.rfile.read(content_length)
        if not raw_body:
            return None

        charset = "utf-8"
        content_type = self.headers.get("Content-Type", "")
        if "charset=" in content_type:
            charset = content_type.split("charset=")[-1].split(";")[0].strip() or "utf-8"
        return raw_body.decode(charset, errors="replace")

    def do_OPTIONS(self):
        self._set_headers(204)

    def do_GET(self):
        self._send(handle_page_request(self.path))

    def do_POST(self):
        if self.path.split("?", 1)[0] != "/extract":
            self._send(json_response({"error": "Not found"}, status=404))
            return

        try:
            html_content = self._read_html()
        except (LookupError, UnicodeError):
            self._send(json_response({"error": "Failed to decode request body."}, status=400))
            return
        if html_content is None:
            self._send(json_response({"error": "Empty request body."}, status=400))
            return

        self._send(handle_extract_request(self.path, html_content))


def run():
    port = int(os.environ.get("DEV_EXTRACT_PORT", "5005"))
    server = HTTPServer(("0.0.0.0", port), DevHandler)
    print(f"Dev API running on http://localhost:{port}")
    print(f"- GET  http://localhost:{port}/<org>/<site>/<path>?schema=true")
    print(f"- POST http://localhost:{port}/extract")
    server.serve_forever()


if __name__ == "__main__":
    run()
