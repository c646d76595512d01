from __future__ import annotations

from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response

NOT_FOUND_TEXT = "404 Not Found"

NOT_FOUND_HTML = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"><title>404 Not Found</title></head>
<body><h1>404 Not Found</h1><p>The page you requested does not exist.</p></body>
</html>
"""


def _media_ranges(accept_header: str) -> list[str]:
    ranges: list[str] = []
    for part in accept_header.split(","):
        media, _, params = part.strip().partition(";")
        media = media.strip().lower()
        if not media:
            continue
        quality = 1.0
        for param in params.split(";"):
            key, _, value = param.strip().partition("=")
            if key.strip() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 1.0
        if quality > 0:
            ranges.append(media)
    return ranges


def accepts(accept_header: str | None, media_type: str) -> bool:
    """True when ``media_type`` is acceptable; a missing header accepts everything."""
    if accept_header is None or not accept_header.strip():
        return True
    main_type = media_type.split("/", 1)[0]
    for media in _media_ranges(accept_header):
        if media in (media_type, "*/*", f"{main_type}/*"):
            return True
    return False


def not_found_response(accept_header: str | None) -> Response:
    if accepts(accept_header, "text/html"):
        return HTMLResponse(NOT_FOUND_HTML, status_code=404)
    if accepts(accept_header, "application/json"):
        return JSONResponse({"message": NOT_FOUND_TEXT}, status_code=404)
    return PlainTextResponse(NOT_FOUND_TEXT, status_code=404)
