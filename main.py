# Copyright (c) 2025 Trae AI. All rights reserved.

import typer
from bonarr.cli.main import app as cli_app
from bonarr.server.app import Server

app = typer.Typer(help="Bonarr - Match torrent files to episodes and link them into your library.")

# Add CLI commands
app.registered_commands.extend(cli_app.registered_commands)

@app.command("server")
def run_server(config_path: str = "config.yaml"):
    """
    Run the JSON API server.
    """
    server = Server(config_path)
    server.run()

if __name__ == "__main__":
    app()
