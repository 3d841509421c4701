"""
app.py

Flask backend serving local media files with HTTP Range support, so players
can seek and download managers can resume.

Routes:
- /api/media/<path:name>
- /api/stream?file=...
- /api/ping

Notes:
- Files are served from MEDIA_DIR; paths escaping it are answered with 404.
- One contiguous range per request. Multi-range, If-Range and ETags are not
  supported.
- A "bytes=-N" range is served as bytes 0..N, not as the last N bytes.
"""

import os
import time
import logging
from typing import Optional

from flask import Flask, request, jsonify, Response, current_app
from flask_cors import CORS
from werkzeug.security import safe_join

from backend.utils.errors import MediaNotFoundError, TransferError
from backend.utils.media import load_partial_media_file

# -------------------------
# Configuration
# -------------------------
BASE_DIR = os.path.dirname(__file__)
MEDIA_DIR = os.environ.get("MEDIA_DIR", os.path.join(BASE_DIR, "media"))
CHUNK_SIZE = int(os.environ.get("MEDIA_CHUNK_SIZE", 8 * 1024))  # 8KB
CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

app = Flask(__name__)
app.config.update(MEDIA_DIR=MEDIA_DIR, CHUNK_SIZE=CHUNK_SIZE, CORS_ORIGINS=CORS_ORIGINS)
CORS(
    app,
    resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}},
    allow_headers=["Range", "Content-Type"],
    expose_headers=["Content-Range", "Content-Length", "Accept-Ranges"],
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("media-range-server")


# -------------------------
# Helpers
# -------------------------
def media_path(name: str) -> Optional[str]:
    """
    Map a client supplied name onto a path inside MEDIA_DIR.
    Returns None when the name would escape the media directory.
    """
    return safe_join(current_app.config["MEDIA_DIR"], name)


def not_found(name: str):
    logger.info("Media not found: %s", name)
    return jsonify({"error": "media file not found"}), 404


def serve_media(name: str):
    path = media_path(name)
    if path is None:
        return not_found(name)

    range_header = request.headers.get("Range")
    try:
        media = load_partial_media_file(path, range_header)
    except MediaNotFoundError:
        return not_found(name)

    chunk_size = current_app.config["CHUNK_SIZE"]

    def generate():
        try:
            yield from media.body(chunk_size)
        except TransferError:
            # headers are already sent, all we can do is cut the stream
            logger.exception("Error streaming file: %s", path)
            raise

    logger.debug(
        "Serving %s %s (%s)", name, media.headers["Content-Range"], media.status_code
    )
    return Response(
        generate(),
        status=media.status_code,
        headers=media.headers,
        direct_passthrough=True,
    )


# -------------------------
# API: Media by path
# -------------------------
@app.route("/api/media/<path:name>")
def api_media(name):
    """
    Stream a file from the media directory, honoring a Range header.
    """
    return serve_media(name)


# -------------------------
# API: Stream by query parameter
# -------------------------
@app.route("/api/stream")
def api_stream():
    """
    Same as /api/media but the file is given as a query parameter.
    Query params:
      - file: path of the media file relative to MEDIA_DIR
    """
    name = request.args.get("file")
    if not name:
        return jsonify({"error": "missing file parameter"}), 400
    return serve_media(name)


# -------------------------
# Health / debug
# -------------------------
@app.route("/api/ping")
def ping():
    return jsonify({"ok": True, "time": int(time.time())})


# -------------------------
# Run (development)
# -------------------------
if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
