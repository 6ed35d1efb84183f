import argparse
from pathlib import Path
from .markup import Speed

def parse_main_args(argv=None):
    parser = argparse.ArgumentParser(description="Taleloom - Interactive fiction player")
    parser.add_argument(
        "--world",
        type=Path,
        default=Path("assets/worlds/example.yaml"),
        help="Path to a world YAML file"
    )
    parser.add_argument(
        "--dev",
        action="store_true",
        help="Enable developer commands (/goto, /state, /run)"
    )
    parser.add_argument(
        "--speed",
        type=str,
        default=Speed.NORMAL.value,
        choices=[speed.value for speed in Speed],
        help="Default text speed"
    )
    parser.add_argument(
        "--no-delay",
        action="store_true",
        help="Print text instantly, ignoring speed and wait markup"
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Do not emit ANSI colors"
    )
    parser.add_argument(
        "--seed",
        type=int,
        required=False,
        help="Seed for random text choices"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args(argv)
