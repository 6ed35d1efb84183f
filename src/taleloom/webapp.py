import random
from dataclasses import dataclass, field
from typing import Optional
from flask import Flask, render_template, request
from .app import App
from .args import parse_main_args
from .engine import ActionResult, Mode
from .errors import EvaluationError
from .events import ScriptEvent
from .log import setup_logging
from .markup import RenderState, expand

@dataclass
class WebAppState:
    last_cmd: Optional[str] = None
    text: Optional[str] = None                                                  # Last rendered page text, shown again on refresh
    rng: random.Random = field(default_factory=random.Random)

def main() -> None:

    # Parse arguments
    args = parse_main_args()
    setup_logging(args.log_level)

    # Create application
    app = App(args)

    # Create web application
    web_app = create_web_app(app, WebAppState(rng=random.Random(args.seed)))
    web_app.run(debug=args.dev)

def render_text(app: App, state: WebAppState, text: str) -> str:
    """Expands markup to plain text. Speeds, pauses and colors have no effect on the web page."""
    render_state = RenderState(rng=state.rng, on_event=lambda argument: app.bus.emit(ScriptEvent(argument)))
    return expand(text, render_state)

def create_web_app(app: App, state: WebAppState) -> Flask:

    web_app = Flask(__name__)

    @web_app.route("/", methods=["GET", "POST"])
    def index():
        if request.method == "POST":
            state.last_cmd = request.form["command"]
            try:
                engine_response: ActionResult = app.handle_raw_command(state.last_cmd)
                text = render_text(app, state, engine_response.message)
            except EvaluationError as exc:
                text = f"STORY ERROR: {exc}"
            state.text = f"> {state.last_cmd}\n\n{text}"

        elif state.text is None:
            # First visit: describe the starting location.
            # Refreshing the page afterwards shows the same text without evaluating anything.
            app.engine.mode = Mode.EXPLORE
            state.text = render_text(app, state, app.engine.get_intro().message)

        return render_template(
            "index.html",
            title=app.world.title,
            text=state.text,
        )

    return web_app

if __name__ == "__main__":
    main()
