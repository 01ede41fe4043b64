# favicon_resolver/api/app.py
import logging

from dotenv import load_dotenv
from flask import Flask, Response, request

from ..config import settings
from ..pipeline import error_response, resolve_favicon

# Load .env if present
load_dotenv()

logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s: %(name)s: %(message)s")
log = logging.getLogger("favicon_resolver.app")

app = Flask(__name__)


# ---------- Helpers ----------
def _flag(name: str) -> bool:
    return (request.args.get(name) or "").strip().lower() == "true"


def _min_size() -> int:
    raw = (request.args.get("minSize") or "0").strip()
    try:
        return max(0, int(raw))
    except ValueError:
        return 0


def _to_response(result) -> Response:
    response = Response(result.body, status=result.status, content_type=result.content_type)
    for key, value in result.headers.items():
        response.headers[key] = value
    return response


# ---------- Routes ----------
@app.get("/healthz")
def healthz():
    return "ok", 200


@app.get("/favicon/<domain>")
def favicon(domain: str):
    try:
        result = resolve_favicon(
            domain,
            larger=_flag("larger"),
            min_size=_min_size(),
            auto_padding=_flag("autoPadding"),
            headers=dict(request.headers),
        )
    except Exception:
        log.exception("Unhandled error resolving %s", domain)
        result = error_response()
    return _to_response(result)


if __name__ == "__main__":
    app.run(debug=False, host=settings.HOST, port=settings.PORT)
