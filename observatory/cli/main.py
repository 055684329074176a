"""Main CLI application using Cyclopts.

Unlike the API, the snapshot command builds its own container and runs the
aggregation in-process; no server is required.
"""

import cyclopts
import logfire

from observatory.cli.commands import serve, snapshot

# Spans are exported only when LOGFIRE_TOKEN is set
logfire.configure(send_to_logfire="if-token-present", console=False, service_name="observatory")

app = cyclopts.App(
    name="observatory",
    help="Observatory - aggregated threat and infrastructure intelligence",
)

app.command(snapshot.app, name="snapshot")
app.command(serve.app, name="serve")
