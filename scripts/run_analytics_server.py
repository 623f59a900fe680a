import sys
from pathlib import Path

# Add the src directory to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


############################################################################################################
def main() -> None:
    import datetime

    # Start the FastAPI app
    import uvicorn
    from loguru import logger

    from calm_mind_service.config.configuration import LOGS_DIR
    from calm_mind_service.services.app_services.analytics_server_fastapi import (
        analytics_server_config,
        app,
    )

    try:
        log_start_time = datetime.datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        logger.add(LOGS_DIR / f"{log_start_time}.log", level="DEBUG")

        uvicorn.run(
            app,
            host=analytics_server_config.server_ip_address,
            port=analytics_server_config.port,
        )
    except Exception as e:
        logger.error(f"Exception: {e}")


############################################################################################################
if __name__ == "__main__":
    main()
