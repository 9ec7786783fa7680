import asyncio
import os

import uvicorn


async def start_server():
    config = uvicorn.Config(
        "catalog_service.app.main:app",
        host=os.getenv("CATALOG_HOST", "0.0.0.0"),
        port=int(os.getenv("CATALOG_PORT", 8003)),
        log_level="info",
    )
    server = uvicorn.Server(config)
    await server.serve()

if __name__ == "__main__":
    try:
        asyncio.run(start_server())
    except KeyboardInterrupt:
        print("\nShutting down catalog service...")
