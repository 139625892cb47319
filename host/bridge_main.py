# STM serial bridge orchestrator: UDP topics <-> dispatcher <-> UART <-> STM32
# NOTE: any serial IO error ends the process (exit 1); restart is the supervisor's job

import argparse
import copy
import logging
import sys
from typing import Any, Dict, Optional

import yaml

from dispatcher import Dispatcher
from stm_comm.errors import TransportOpenError
from stm_comm.serial_link import SerialLink
from stm_comm.udp_channels import UdpChannels

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Dict[str, Any]] = {
    "comms": {"port": "/dev/ttyUSB0", "baud": 115200, "timeout": 0.01},
    "bridge": {"poll_period_s": 0.1, "resync": False},
    "channels": {"bind_host": "0.0.0.0", "rx_port": 5006, "peer_host": "127.0.0.1", "peer_port": 5005},
    "logging": {"level": "INFO"},
}


def load_config(path: Optional[str] = None) -> Dict[str, Dict[str, Any]]:
    """
    DEFAULTS with the YAML file's sections merged over them.
    No path -> defaults only. Unknown sections are kept as-is.
    """
    cfg = copy.deepcopy(DEFAULTS)
    if path is None:
        return cfg
    with open(path) as f:
        loaded = yaml.safe_load(f) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    for section, values in loaded.items():
        if isinstance(values, dict) and isinstance(cfg.get(section), dict):
            cfg[section].update(values)
        else:
            cfg[section] = values
    return cfg


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Bridge STM32 sensor/command frames to UDP topics")
    ap.add_argument("--config", type=str, default=None, help="YAML config file")
    ap.add_argument("--port", type=str, default=None, help="serial port or pyserial URL")
    ap.add_argument("--baud", type=int, default=None)
    ap.add_argument("--log-level", type=str, default=None)
    return ap.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        cfg = load_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"config error: {e}", file=sys.stderr)
        return 2

    if args.port is not None:
        cfg["comms"]["port"] = args.port
    if args.baud is not None:
        cfg["comms"]["baud"] = args.baud
    if args.log_level is not None:
        cfg["logging"]["level"] = args.log_level

    level = str(cfg["logging"].get("level", "INFO")).upper()
    if not isinstance(logging.getLevelName(level), int):
        print(f"config error: unknown log level {level!r}", file=sys.stderr)
        return 2
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        link = SerialLink(**cfg["comms"])
    except TransportOpenError as e:
        logger.error("%s", e)
        return 1

    try:
        channels = UdpChannels(**cfg["channels"])
    except OSError as e:
        logger.error("Unable to open topic channels: %s", e)
        link.close()
        return 1

    bcfg = cfg["bridge"]
    disp = Dispatcher(
        link,
        sink=channels.publish,
        source=channels.recv_events,
        poll_period_s=float(bcfg.get("poll_period_s", 0.1)),
        resync=bool(bcfg.get("resync", False)),
    )
    logger.info("Bridge running on %s, topics on udp %s -> %s:%d",
                link.port, channels.rx_addr, *channels.tx_addr)

    try:
        ok = disp.run()
    except KeyboardInterrupt:
        disp.shutdown("interrupted")
        ok = True
    finally:
        channels.close()
        link.close()
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
