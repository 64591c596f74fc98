"""Main application entry point.

Runs the FastAPI gateway (default port 3001) with NiceGUI mounted for the
document chat UI. Environment variables are loaded from .env file.
"""

import logging
import os
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def run_integrated() -> None:
    """Run FastAPI with NiceGUI mounted on the same server.

    FastAPI handles /api and /health, NiceGUI handles the UI at /.
    """
    import uvicorn
    from nicegui import ui

    from docchat.api.app import create_app
    from docchat.config import get_server_config
    from docchat.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    config = get_server_config()
    app = create_app(config)

    # Mount NiceGUI onto FastAPI
    ui.run_with(
        app,
        title="DocChat",
        favicon="📄",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "docchat-secret"),
    )

    logger.info(f"Starting integrated server on http://localhost:{config.port}")
    logger.info(f"API docs available at http://localhost:{config.port}/docs")
    logger.info(f"Chat UI available at http://localhost:{config.port}/")

    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


def run_separate() -> None:
    """Run the gateway and the UI as two child processes.

    The gateway listens on PORT and the UI on UI_PORT; the UI reaches the
    gateway through API_BASE_URL. When either process exits the other is
    stopped too.
    """
    import subprocess
    import time

    from docchat.config import get_server_config

    config = get_server_config()
    ui_port = os.getenv("UI_PORT", "8080")

    commands = {
        "gateway": [
            sys.executable,
            "-m",
            "uvicorn",
            "docchat.api.app:app",
            "--host",
            config.host,
            "--port",
            str(config.port),
        ],
        "ui": [sys.executable, "-c", "from docchat.ui.chat_page import main; main()"],
    }
    logger.info(f"Gateway on http://localhost:{config.port}, UI on http://localhost:{ui_port}")
    processes = {name: subprocess.Popen(cmd) for name, cmd in commands.items()}

    try:
        while not any(proc.poll() is not None for proc in processes.values()):
            time.sleep(1)
        exited = [name for name, proc in processes.items() if proc.poll() is not None]
        logger.warning(f"{', '.join(exited)} exited; stopping the remaining process")
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        for proc in processes.values():
            proc.terminate()
        for proc in processes.values():
            proc.wait()


def main() -> None:
    """Application entry point.

    Set RUN_MODE=separate to run FastAPI and NiceGUI on different ports.
    Default is integrated mode (both on PORT).
    """
    mode = os.getenv("RUN_MODE", "integrated").lower()

    logger.info(f"Starting DocChat in {mode} mode")

    if mode == "separate":
        run_separate()
    else:
        run_integrated()


if __name__ == "__main__":
    main()
