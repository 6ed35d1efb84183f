import random
from .app import App
from .args import parse_main_args
from .console import ConsolePresenter
from .engine import ActionResult
from .errors import EvaluationError, TaleloomError
from .log import setup_logging
from .markup import Speed

def main() -> None:

    # Parse arguments
    args = parse_main_args()
    setup_logging(args.log_level)

    # Load world and create engine
    try:
        app = App(args)
    except TaleloomError as exc:
        print(f"Cannot start: {exc}")
        raise SystemExit(1)

    presenter = ConsolePresenter(
        bus=app.bus,
        speed=Speed(args.speed),
        delay=not args.no_delay,
        color=not args.no_color,
        rng=random.Random(args.seed),
    )

    # Initial location
    presenter.write(app.engine.get_intro().message)

    # Main loop
    while True:
        try:
            player_cmd_str = input("> ").strip()
        except EOFError:
            break
        if not player_cmd_str:
            continue
        if player_cmd_str.lower() in { "quit", "exit" }:
            break

        try:
            engine_response: ActionResult = app.handle_raw_command(player_cmd_str)
        except EvaluationError as exc:
            print(f"STORY ERROR: {exc}")
            continue

        print()
        presenter.write(engine_response.message)

if __name__ == "__main__":
    main()
