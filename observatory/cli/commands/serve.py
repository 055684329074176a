"""Serve command - run the HTTP API in the foreground."""

import cyclopts
import uvicorn

from observatory.cli.console import get_console

app = cyclopts.App(name="serve", help="Run the HTTP API")


@app.default
def serve(
    *,
    host: str = "127.0.0.1",
    port: int = 8000,
    reload: bool = False,
) -> None:
    """Start the API server under uvicorn.

    Args:
        host: Host to bind to.
        port: Port to listen on.
        reload: Restart on source changes (development only).
    """
    console = get_console()
    console.info(f"Serving on http://{host}:{port}/api/v1/snapshot")
    uvicorn.run(
        "observatory.application.api.rest.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )
