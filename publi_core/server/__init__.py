from publi_core.server.app import create_app
from publi_core.server.storage import DocumentRowStorage

__all__ = ["create_app", "DocumentRowStorage"]
