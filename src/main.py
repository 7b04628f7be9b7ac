import argparse
import sys
import os
import time

# Add project root to sys.path to allow imports from 'src'
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

def main(argv=None):
    """
    Main entry point for the Modular Monolith application.
    Extra `key=value` arguments are merged into the config as OmegaConf dotlist overrides.
    """
    parser = argparse.ArgumentParser(description="CerebroVial - Modular Monolith Entry Point")
    parser.add_argument('module', choices=['control'], help="Module to run")
    parser.add_argument('--profile', default='default', help="Config profile under conf/control/")
    parser.add_argument('--status-every', type=float, default=5.0, help="Seconds between status log lines")

    args, unknown = parser.parse_known_args(argv)

    from pathlib import Path
    from src.common.config.manager import ConfigManager
    from src.common.logging import setup_logger, set_level
    from src.control.application.builder import ControlApplicationBuilder

    logger = setup_logger("src.main")
    logger.info(f"Starting module: {args.module}")

    cfg = ConfigManager(Path("conf")).load_control_config(args.profile, overrides=unknown)

    builder = ControlApplicationBuilder(cfg)
    builder.build_service().seed_intersections()
    runner = builder.build_runner()
    set_level(cfg.logging.level)

    service = builder.service
    if cfg.scheduler.enabled:
        runner.start()
    logger.info("Control loop running. Press Ctrl+C to exit.")
    try:
        while True:
            time.sleep(args.status_every)
            for intersection in service.list_intersections():
                phase, remaining = service.phase_info(intersection.id)
                lights = " ".join(f"{d.name[0]}={s.name}" for d, s in intersection.snapshot().items())
                logger.info(
                    f"{intersection.id} [{intersection.mode.name}] {lights} "
                    f"phase={phase} remaining={remaining}ms"
                )
    except KeyboardInterrupt:
        logger.info("Stopping control loop...")
    finally:
        runner.stop()

if __name__ == "__main__":
    main()
