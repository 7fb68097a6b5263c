from __future__ import annotations

import os

from assistants_client.config.settings import SERVER_NAME, SERVER_VERSION

HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "8010"))

SERVICE_TITLE = f"{SERVER_NAME} (specialist tools)"
SERVICE_VERSION = SERVER_VERSION

MCP_MOUNT_PATH = "/mcp"
