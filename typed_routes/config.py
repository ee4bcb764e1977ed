import os

from dotenv import load_dotenv

load_dotenv()


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer number of bytes, got {raw!r}")


class Config:
    # Largest request body buffered before a typed handler runs.
    # Flask apps can override per app with app.config['TYPED_ROUTES_MAX_BODY_SIZE'].
    DEFAULT_MAX_BODY_SIZE = _get_int('TYPED_ROUTES_MAX_BODY_SIZE', 16 * 1024)

    # Log (at DEBUG) when a present query/header value fails to coerce
    LOG_COERCION_FAILURES = os.getenv('TYPED_ROUTES_LOG_COERCION_FAILURES', 'true').lower() == 'true'


def get_max_body_size(app=None) -> int:
    """Resolve the body size limit: app config first, then the environment default."""
    if app is not None:
        configured = app.config.get('TYPED_ROUTES_MAX_BODY_SIZE')
        if configured is not None:
            return int(configured)
    return Config.DEFAULT_MAX_BODY_SIZE
