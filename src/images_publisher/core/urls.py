"""Public URL derivation and rendering."""

from urllib.parse import urlsplit

from .exceptions import ConfigurationError
from .models import PublicUrlConfig


def join_url(base: str, key: str) -> str:
    """Join a base URL and a key with exactly one slash."""
    return f"{base.rstrip('/')}/{key.lstrip('/')}"


def build_public_url(config: PublicUrlConfig, key: str) -> str:
    """
    Derive the public URL for a stored key.

    A custom base, when enabled and non-empty, wins outright. Otherwise
    the URL is built from the store endpoint: virtual-hosted style puts
    the bucket in front of the host, path style puts it in the path.

    Raises:
        ConfigurationError: If the endpoint has no scheme or host, or a
            malformed port.
    """
    if config.use_custom_base and config.custom_base:
        return join_url(config.custom_base, key)

    endpoint = config.endpoint.rstrip("/")
    clean_key = key.lstrip("/")

    if config.addressing_style == "virtual":
        parts = urlsplit(endpoint)
        if not parts.scheme or not parts.hostname:
            raise ConfigurationError(f"Invalid store endpoint: {config.endpoint!r}")
        try:
            port = parts.port
        except ValueError as exc:
            raise ConfigurationError(
                f"Invalid store endpoint port: {config.endpoint!r}"
            ) from exc
        host = f"{config.bucket}.{parts.hostname}"
        if port:
            host = f"{host}:{port}"
        return f"{parts.scheme}://{host}/{clean_key}"

    if not endpoint:
        raise ConfigurationError("Store endpoint is empty")
    return f"{endpoint}/{config.bucket.strip('/')}/{clean_key}"


def format_url(url: str, url_format: str = "raw") -> str:
    """Render a URL as raw text, a Markdown image or a BBCode image."""
    if url_format == "markdown":
        return f"![]({url})"
    if url_format == "bbcode":
        return f"[img]{url}[/img]"
    return url
