from ..core.logs import setup_logging
from ..core.config import Settings
from .utils import buildRuntime, getRuntime, setRuntime

from contextlib import asynccontextmanager, suppress
from fastmcp import FastMCP
from loguru import logger
import asyncio
import signal
import sys

SHUTDOWN_SIGNALS = [
    getattr(signal, name) for name in ("SIGINT", "SIGTERM", "SIGQUIT") if hasattr(signal, name)
]

@asynccontextmanager
async def lifespan(server :FastMCP):
    runtime = getRuntime()
    runtime.backend.start_supervision()
    try:
        yield
    finally:
        logger.info("Shutting down tool backend")
        await runtime.backend.close()

reasonTideMCPServer = FastMCP(
    name="reasontide",
    lifespan=lifespan
)

def serve():
    settings = Settings.from_env()
    setup_logging(settings.log_dir, settings.log_level)
    if not settings.openai_api_key:
        logger.error("OPENAI_API_KEY environment variable is required")
        sys.exit(1)

    setRuntime(buildRuntime(settings))
    try:
        asyncio.run(aserve())
    except KeyboardInterrupt:
        pass

async def aserve():
    loop = asyncio.get_running_loop()
    main_task = asyncio.current_task()
    for sig in SHUTDOWN_SIGNALS:
        with suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, main_task.cancel)

    try:
        await reasonTideMCPServer.run_stdio_async()
    except asyncio.CancelledError:
        logger.info("Shutdown signal received")

if __name__ == "__main__":
    serve()
