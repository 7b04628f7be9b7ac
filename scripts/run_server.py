import os
import sys
import hydra
import uvicorn
from omegaconf import DictConfig, OmegaConf

# Add src to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from src.common.config.manager import validate_control_config
from src.common.config.models import ControlConfig
from src.common.logging import setup_logger, set_level
from src.control.application.builder import ControlApplicationBuilder
from src.control.presentation.api import app, init_app

logger = setup_logger("src.scripts.run_server")

@hydra.main(version_base=None, config_path="../conf", config_name="config")
def main(cfg: DictConfig):
    control_cfg = OmegaConf.merge(OmegaConf.structured(ControlConfig), cfg.control)
    validate_control_config(control_cfg)
    logger.info("Configuration loaded.")

    builder = ControlApplicationBuilder(control_cfg)
    builder.build_service().seed_intersections()
    runner = builder.build_runner()
    init_app(builder.service, builder.metrics_collector)
    set_level(control_cfg.logging.level)

    @app.on_event("startup")
    def startup_event():
        if control_cfg.scheduler.enabled:
            runner.start()

    @app.on_event("shutdown")
    def shutdown_event():
        runner.stop()

    server_cfg = control_cfg.server
    logger.info(f"Starting server at http://{server_cfg.host}:{server_cfg.port}")
    uvicorn.run(app, host=server_cfg.host, port=server_cfg.port)

if __name__ == "__main__":
    main()
