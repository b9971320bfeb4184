# =============================================================================
# publi_core/server/__main__.py
# Run the persistence service: python -m publi_core.server
# =============================================================================

import uvicorn

from publi_core.config import load_config
from publi_core.logging import setup_logging
from publi_core.server.app import create_app


def main() -> None:
    config = load_config()
    setup_logging(config.log_level)

    app = create_app(config.server_db_path, max_body_bytes=config.max_body_bytes)
    uvicorn.run(app, host=config.server_host, port=config.server_port)


if __name__ == "__main__":
    main()
