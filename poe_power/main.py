import argparse
import logging
import os
import sys
from typing import List, Optional

from .api import SystemIdRequestHandler, create_app
from .config import Settings, load_settings
from .directory import SwitchDirectory
from .errors import PowerControlError
from .handler import DeviceControlAdapter
from .logging_config import configure_logging
from .memory_client import InMemoryControllerClient
from .models import PoeMode, RemoteDevice, RemotePort
from .service import PowerService
from .session import SwitchSession
from .unifi_client import ControllerClient, UnifiClient

logger = logging.getLogger(__name__)


def _fake_controller(settings: Settings) -> InMemoryControllerClient:
    """Controller double mirroring the configured fleet, every port powered."""
    devices = [
        RemoteDevice(
            address=d.address,
            controller_handle=f"fake-{d.address.replace(':', '')}",
            ports=[RemotePort(index=m.port_index, power_mode=PoeMode.AUTO) for m in d.machines],
        )
        for d in settings.fleet.devices
    ]
    return InMemoryControllerClient(devices)


def build_service(settings: Settings) -> PowerService:
    """Create the controller client, log in once and wire the mediation layer.

    Raises FailedToConstructUrl or AuthError; both are fatal.
    """
    ctrl = settings.controller
    client: ControllerClient
    if ctrl.fake:
        logger.warning("controller.fake is enabled: no real controller will be contacted")
        client = _fake_controller(settings)
    else:
        client = UnifiClient(ctrl.url, verify_ssl=ctrl.verify_ssl, timeout=ctrl.timeout)

    SwitchSession(client).authenticate(ctrl.username, ctrl.password)

    directory = SwitchDirectory(client)
    adapter = DeviceControlAdapter(settings.fleet, directory, client)
    return PowerService(adapter)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="poe-power",
        description="MAAS webhook power driver that toggles PoE on UniFi switch ports.",
    )
    parser.add_argument(
        "-c",
        "--config",
        dest="config_file",
        default=None,
        help="YAML config file (default: $APP_CONFIG_FILE or config.yml)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    # Configure logging early so load_settings() warnings/errors are visible.
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    try:
        settings = load_settings(args.config_file)
    except RuntimeError as exc:
        logger.error("Configuration error: %s", exc)
        return 1

    configure_logging(settings.log_level, settings.log_dir)

    try:
        service = build_service(settings)
    except PowerControlError as exc:
        logger.error("Startup failed (%s): %s", exc.kind, exc.message)
        return 1

    app = create_app(service)
    logger.info("Serving power driver on %s:%s", settings.listen_host, settings.listen_port)
    app.run(
        host=settings.listen_host,
        port=settings.listen_port,
        threaded=True,
        request_handler=SystemIdRequestHandler,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
