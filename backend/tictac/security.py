import re
from typing import Optional
from flask import request, jsonify, current_app

# Looks like a UUID (8-4-4-4-12 hex) ...
UUID_LIKE = re.compile(r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$', re.IGNORECASE)
# ... and is an RFC 4122 UUID of version 1-5
UUID_VALID = re.compile(r'^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$', re.IGNORECASE)

FORBIDDEN_QUERY_FRAGMENTS = ("'", ';', '--', '/*', '*/', 'xp_')

SECURITY_HEADERS = {
    'X-Frame-Options': 'DENY',
    'X-Content-Type-Options': 'nosniff',
    'Referrer-Policy': 'origin-when-cross-origin',
    'Permissions-Policy': 'camera=(), microphone=(), geolocation=()',
    'X-XSS-Protection': '1; mode=block',
    'X-DNS-Prefetch-Control': 'off',
    'Strict-Transport-Security': 'max-age=31536000; includeSubDomains',
}

CONTENT_SECURITY_POLICY = (
    "default-src 'self'; script-src 'self' 'unsafe-inline' https://telegram.org; "
    "connect-src 'self'; img-src 'self' data: blob:; style-src 'self' 'unsafe-inline'; "
    "font-src 'self' data:; object-src 'none'; base-uri 'self'; form-action 'self';"
)


def check_request(path: str, args) -> Optional[str]:
    """Return an error message if the request must be rejected, else None."""
    for segment in path.split('/'):
        if UUID_LIKE.match(segment) and not UUID_VALID.match(segment):
            return 'Invalid UUID format'
    for _key, value in args.items(multi=True):
        if any(fragment in value for fragment in FORBIDDEN_QUERY_FRAGMENTS):
            return 'Invalid characters in request'
    return None


def register_request_filters(app) -> None:
    @app.before_request
    def _reject_suspicious_input():
        if not request.path.startswith('/api/'):
            return None
        error = check_request(request.path, request.args)
        if error:
            current_app.logger.warning(f"[filter] rejected {request.method} {request.full_path}: {error}")
            return jsonify({'error': error}), 400
        return None

    @app.after_request
    def _add_security_headers(response):
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        if current_app.config.get('ENABLE_CSP'):
            response.headers['Content-Security-Policy'] = CONTENT_SECURITY_POLICY
        return response
