"""Live reload support."""

from folio.live.reload import LiveReloadManager

__all__ = ["LiveReloadManager"]
