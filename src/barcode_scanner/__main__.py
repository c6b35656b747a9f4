"""Run the Barcode Scanner GUI, or decode a single image."""
from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from .config import AppConfig, CameraConfig
from .decoder import FrameDecoder


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="barcode-scanner", description=__doc__)
    parser.add_argument("--camera-index", type=int, help="camera device to open")
    parser.add_argument("--log-level", help="logging level, e.g. DEBUG")
    parser.add_argument("--image", help="decode this image file and exit")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    config = AppConfig()
    if args.log_level:
        config.log_level = args.log_level.upper()

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.image:
        value = FrameDecoder(config).decode_file(args.image)
        if value is None:
            logging.getLogger(__name__).error("No barcode found in %s", args.image)
            return 1
        print(value)
        return 0

    from .app import run

    return run(config, CameraConfig(index=args.camera_index))


if __name__ == "__main__":  # pragma: no cover - manual launch only
    raise SystemExit(main())
