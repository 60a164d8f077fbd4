"""Interactive Dash UI for the page replacement simulator.

Run with:
    python -m page_replacement.visualization.dash_app

Opens at http://127.0.0.1:7860
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, Callable

import plotly.graph_objects as go
from plotly.subplots import make_subplots

import dash
from dash import dcc, html, ctx, dash_table, Input, Output, State, no_update

from page_replacement import config
from page_replacement.core.errors import PageReplacementError
from page_replacement.core.timeline import SimulationResult
from page_replacement.simulation.commentary import (
    COMMENTARY_UNAVAILABLE,
    CommentaryClient,
    CommentaryRequest,
)
from page_replacement.simulation.engine import (
    Algorithm,
    compare_algorithms,
    parse_frame_count,
    parse_references,
    run_simulation,
)
from page_replacement.simulation.navigator import TimelineNavigator
from page_replacement.simulation.statistics import step_statistics
from page_replacement.visualization.narration import cell_tooltip, describe_step
from page_replacement.visualization.renderer import FAULT_COLOR, HIT_COLOR, RATE_COLOR, GridAdapter, cell_matrix

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════
#  Dark plotly theme
# ═══════════════════════════════════════════════════════════════════════

_LAYOUT_DEFAULTS = dict(
    template="plotly_dark",
    paper_bgcolor="#0a0a0f",
    plot_bgcolor="#0a0a0f",
    font=dict(family="Inter, -apple-system, sans-serif", color="#e8eaed"),
    margin=dict(l=20, r=20, t=50, b=20),
    uirevision="stable",
)


# ═══════════════════════════════════════════════════════════════════════
#  Per-tab sessions
# ═══════════════════════════════════════════════════════════════════════


class ClientIntervalScheduler:
    """Scheduler whose ticks come from the browser's ``dcc.Interval``.

    The navigator still owns play/pause: starting a timer only arms this
    object, and each interval callback calls :meth:`fire`.
    """

    def __init__(self) -> None:
        self.interval_ms: int | None = None
        self._callback: Callable[[], None] | None = None

    def __call__(self, interval: float, callback: Callable[[], None]) -> ClientIntervalScheduler:
        self.interval_ms = int(interval * 1000)
        self._callback = callback
        return self

    @property
    def armed(self) -> bool:
        return self._callback is not None

    def fire(self) -> None:
        if self._callback is not None:
            self._callback()

    def cancel(self) -> None:
        self._callback = None


@dataclass
class Session:
    adapter: GridAdapter = field(default_factory=GridAdapter)
    scheduler: ClientIntervalScheduler = field(default_factory=ClientIntervalScheduler)
    navigator: TimelineNavigator = field(init=False)
    commentary: Future | None = None

    def __post_init__(self) -> None:
        self.navigator = TimelineNavigator(self.adapter, scheduler=self.scheduler)


# least recently used first
_sessions: OrderedDict[str, Session] = OrderedDict()
_sessions_lock = threading.Lock()
_commentary = CommentaryClient(config.COMMENTARY_URL, timeout=config.COMMENTARY_TIMEOUT)


def _get_session(session_id: str) -> Session:
    with _sessions_lock:
        session = _sessions.get(session_id)
        if session is None:
            session = _sessions[session_id] = Session()
        _sessions.move_to_end(session_id)
        while len(_sessions) > config.MAX_SESSIONS:
            evicted_id, evicted = _sessions.popitem(last=False)
            evicted.navigator.stop()
            logger.debug("Evicted idle session %s", evicted_id)
        return session


# ═══════════════════════════════════════════════════════════════════════
#  Figures
# ═══════════════════════════════════════════════════════════════════════


def _grid_figure(result: SimulationResult, session: Session) -> go.Figure:
    """Frames x time heatmap of the columns rendered so far."""
    columns = session.adapter.columns
    frame_count = result.frame_count
    total = len(result.steps)

    fig = go.Figure()
    if columns:
        z = cell_matrix(columns, frame_count)
        text = [[("" if s.frames_after[slot] is None else str(s.frames_after[slot])) for s in columns]
                for slot in range(frame_count)]
        hover = [[(cell_tooltip(s, slot) or f"Frame {slot + 1}: {text[slot][col] or 'empty'}")
                  for col, s in enumerate(columns)]
                 for slot in range(frame_count)]
        fig.add_trace(go.Heatmap(
            z=z,
            x=list(range(len(columns))),
            y=list(range(frame_count)),
            text=text,
            texttemplate="%{text}",
            textfont=dict(size=16),
            hovertext=hover,
            hoverinfo="text",
            zmin=0, zmax=2,
            colorscale=[[0.0, "#1a1a2e"], [0.33, "#1a1a2e"],
                        [0.34, FAULT_COLOR], [0.66, FAULT_COLOR],
                        [0.67, HIT_COLOR], [1.0, HIT_COLOR]],
            showscale=False,
            xgap=2, ygap=2,
        ))

    fig.update_layout(
        title=dict(text=f"{result.algorithm or 'Simulation'} -- T{len(columns)} of {total}", font=dict(size=14)),
        xaxis=dict(
            range=[-0.5, max(total, 1) - 0.5],
            tickvals=list(range(total)),
            ticktext=[f"T{s.index}" for s in result.steps],
            showgrid=False,
        ),
        yaxis=dict(
            range=[frame_count - 0.5, -0.5] if frame_count else None,
            tickvals=list(range(frame_count)),
            ticktext=[f"Frame {i + 1}" for i in range(frame_count)],
            showgrid=False,
        ),
        height=max(200, 70 * frame_count + 100),
        **_LAYOUT_DEFAULTS,
    )
    return fig


def _performance_figure(result: SimulationResult) -> go.Figure:
    stats = step_statistics(result)
    labels = [f"T{i}" for i in stats.index]

    fig = make_subplots(specs=[[{"secondary_y": True}]])
    fig.add_trace(go.Bar(x=labels, y=stats["fault"], name="Page Faults per Step",
                         marker_color=FAULT_COLOR, opacity=0.6), secondary_y=False)
    fig.add_trace(go.Bar(x=labels, y=stats["hit"], name="Page Hits per Step",
                         marker_color=HIT_COLOR, opacity=0.6), secondary_y=False)
    fig.add_trace(go.Scatter(x=labels, y=stats["cumulative_faults"], name="Cumulative Page Faults",
                             mode="lines+markers", line=dict(color=FAULT_COLOR)), secondary_y=False)
    fig.add_trace(go.Scatter(x=labels, y=stats["cumulative_hits"], name="Cumulative Page Hits",
                             mode="lines+markers", line=dict(color=HIT_COLOR)), secondary_y=False)
    fig.add_trace(go.Scatter(x=labels, y=stats["fault_rate"], name="Page Fault Rate (%)",
                             mode="lines", line=dict(color=RATE_COLOR, dash="dash"),
                             hovertemplate="%{y:.2f}%<extra></extra>"), secondary_y=True)
    fig.update_yaxes(title_text="Count", secondary_y=False)
    fig.update_yaxes(title_text="Fault Rate (%)", range=[0, 100], secondary_y=True)
    fig.update_layout(
        title=dict(text="Page Replacement Performance Metrics", font=dict(size=14)),
        xaxis=dict(title="Time (Steps)"),
        barmode="group",
        height=350,
        **_LAYOUT_DEFAULTS,
    )
    return fig


def _comparison_table(result: SimulationResult) -> dash_table.DataTable:
    df = compare_algorithms(result.references, result.frame_count).reset_index()
    df["fault_rate"] = (df["fault_rate"] * 100).round(1)
    df["hit_rate"] = (df["hit_rate"] * 100).round(1)
    return dash_table.DataTable(
        data=df.to_dict("records"),
        columns=[
            {"name": "Algorithm", "id": "algorithm"},
            {"name": "Faults", "id": "faults"},
            {"name": "Hits", "id": "hits"},
            {"name": "Fault %", "id": "fault_rate"},
            {"name": "Hit %", "id": "hit_rate"},
        ],
        style_cell={"textAlign": "center", "padding": "4px 8px", "backgroundColor": "#12121c",
                    "color": "#e8eaed", "border": "1px solid #2a2a3a"},
        style_header={"fontWeight": "bold"},
        style_data_conditional=[{
            "if": {"filter_query": f'{{algorithm}} = "{result.algorithm}"'},
            "backgroundColor": "rgba(124, 92, 252, 0.25)",
        }],
    )


# mode bar reduced to the png download
_PERFORMANCE_GRAPH_CONFIG = {
    "displayModeBar": True,
    "displaylogo": False,
    "modeBarButtonsToRemove": [
        "zoom2d", "pan2d", "select2d", "lasso2d", "zoomIn2d", "zoomOut2d",
        "autoScale2d", "resetScale2d", "hoverClosestCartesian", "hoverCompareCartesian",
    ],
    "toImageButtonOptions": {"filename": "performance_chart", "format": "png"},
}


def _empty_figure(height: int = 250) -> go.Figure:
    fig = go.Figure()
    fig.update_layout(height=height, **_LAYOUT_DEFAULTS)
    return fig


# ═══════════════════════════════════════════════════════════════════════
#  Dash app + dark theme
# ═══════════════════════════════════════════════════════════════════════

app = dash.Dash(
    __name__,
    title="Page Replacement Simulator",
    suppress_callback_exceptions=True,
)

app.index_string = """<!DOCTYPE html>
<html>
<head>
    {%metas%}
    <title>{%title%}</title>
    {%favicon%}
    {%css%}
    <style>
        :root {
            --bg-base: #0a0a0f;
            --bg-surface: rgba(15, 15, 25, 0.8);
            --glass-border: rgba(255, 255, 255, 0.08);
            --text-primary: #e8eaed;
            --text-secondary: #9aa0a6;
            --accent: #7c5cfc;
            --accent-hover: #9b7dff;
            --accent-red: #f87171;
            --radius-sm: 8px;
            --radius-md: 12px;
        }
        * { box-sizing: border-box; margin: 0; padding: 0; }
        body {
            background: var(--bg-base); color: var(--text-primary);
            font-family: 'Inter', -apple-system, BlinkMacSystemFont, sans-serif;
            line-height: 1.6;
        }
        .sidebar {
            position: fixed; top: 0; left: 0; bottom: 0; width: 320px;
            background: var(--bg-surface);
            border-right: 1px solid var(--glass-border);
            padding: 24px 20px; overflow-y: auto;
        }
        .sidebar h2 { font-size: 1.35em; font-weight: 700; margin-bottom: 20px; color: var(--accent-hover); }
        .sidebar label {
            display: block; margin: 10px 0 4px 0;
            color: var(--text-secondary); font-size: 0.8em; font-weight: 500;
        }
        .sidebar textarea, .sidebar input {
            width: 100%; background: #12121c; color: var(--text-primary);
            border: 1px solid var(--glass-border); border-radius: var(--radius-sm); padding: 6px 8px;
        }
        .main-area { margin-left: 320px; padding: 24px 32px; }
        .control-bar { display: flex; gap: 8px; margin-bottom: 12px; }
        button {
            background: rgba(255,255,255,0.05); color: var(--text-primary);
            border: 1px solid var(--glass-border); border-radius: var(--radius-sm);
            padding: 8px 16px; cursor: pointer; font-weight: 500;
        }
        button:hover { border-color: var(--accent); }
        button:disabled { opacity: 0.4; cursor: not-allowed; }
        button.primary { background: var(--accent); border-color: var(--accent); }
        button.danger { color: var(--accent-red); }
        .input-error { color: var(--accent-red); font-size: 0.85em; margin-top: 8px; }
        .round-badge {
            display: inline-block; padding: 4px 12px; margin: 4px 8px 8px 0;
            border-radius: var(--radius-md); border: 1px solid var(--glass-border);
            font-weight: 600;
        }
        .narration { margin: 12px 0; color: var(--text-secondary); }
        .section-card {
            border: 1px solid var(--glass-border); border-radius: var(--radius-md);
            padding: 12px 16px; margin-top: 16px;
        }
        details summary { cursor: pointer; margin-top: 16px; font-weight: 600; }
    </style>
</head>
<body>
    {%app_entry%}
    <footer>
        {%config%}
        {%scripts%}
        {%renderer%}
    </footer>
</body>
</html>
"""


def _serve_layout():
    return html.Div([
        # ── Sidebar ──────────────────────────────────────────────────
        html.Div([
            html.H2("Page Replacement"),

            html.Label("Page References"),
            dcc.Textarea(id="page-references", value=config.DEFAULT_REFERENCES,
                         style={"height": "80px"}),

            html.Label("Frames"),
            dcc.Slider(id="frame-count", min=1, max=config.MAX_FRAMES, step=1,
                       value=config.DEFAULT_FRAMES,
                       marks={i: str(i) for i in range(1, config.MAX_FRAMES + 1)}),

            html.Label("Algorithm"),
            dcc.Dropdown(
                id="algorithm",
                options=[{"label": a.label, "value": a.value} for a in Algorithm],
                value=Algorithm.FIFO.value,
                clearable=False,
                style={"color": "#0a0a0f"},
            ),

            html.Label("Auto-Play Speed (ms)"),
            dcc.Slider(id="speed-slider", min=200, max=2000, step=100, value=config.AUTOPLAY_MS,
                       marks={200: "200", 1000: "1s", 2000: "2s"}),

            html.Button("Start Simulation", id="btn-start", className="primary", n_clicks=0,
                        style={"marginTop": "16px", "width": "100%"}),
            html.Div(id="input-error", className="input-error"),
        ], className="sidebar"),

        # ── Main area ────────────────────────────────────────────────
        html.Div([
            html.Div([
                html.Button("Prev", id="btn-prev", n_clicks=0, disabled=True),
                html.Button("Next", id="btn-next", className="primary", n_clicks=0, disabled=True),
                html.Button("Play", id="btn-play", n_clicks=0, disabled=True),
                html.Button("Reset", id="btn-reset", className="danger", n_clicks=0),
            ], className="control-bar"),

            html.Div(id="total-faults", className="round-badge"),
            html.Div(id="step-display", children="Step: 0", className="round-badge"),

            dcc.Graph(id="grid-graph", figure=_empty_figure(), config={"displayModeBar": False}),
            html.P(id="narration", children=describe_step(None), className="narration"),

            html.Div(className="section-card", children=[
                html.Div("Feedback", style={"fontWeight": "600"}),
                html.P(id="commentary"),
            ]),

            html.Details([
                html.Summary("Performance Chart"),
                dcc.Graph(id="performance-graph", figure=_empty_figure(), config=_PERFORMANCE_GRAPH_CONFIG),
            ]),

            html.Details([
                html.Summary("Compare Algorithms"),
                html.Div(id="comparison"),
            ]),

            # Hidden components
            dcc.Interval(id="auto-play-interval", interval=config.AUTOPLAY_MS, disabled=True),
            dcc.Interval(id="commentary-poll", interval=1000, disabled=True),
            dcc.Store(id="session-id", data=str(uuid.uuid4())),
        ], className="main-area"),
    ])


app.layout = _serve_layout


# ═══════════════════════════════════════════════════════════════════════
#  Callbacks
# ═══════════════════════════════════════════════════════════════════════

_VIEW_OUTPUTS = [
    Output("grid-graph", "figure", allow_duplicate=True),
    Output("narration", "children", allow_duplicate=True),
    Output("step-display", "children", allow_duplicate=True),
    Output("total-faults", "children", allow_duplicate=True),
    Output("btn-prev", "disabled", allow_duplicate=True),
    Output("btn-next", "disabled", allow_duplicate=True),
    Output("btn-play", "children", allow_duplicate=True),
    Output("btn-play", "disabled", allow_duplicate=True),
    Output("auto-play-interval", "disabled", allow_duplicate=True),
]


def _view(session: Session) -> tuple[Any, ...]:
    nav = session.navigator
    result = nav.result
    playing = nav.is_playing
    return (
        _grid_figure(result, session),
        describe_step(nav.current_step),
        f"Step: {nav.position} of {len(nav.steps)}",
        f"Total Page Faults: {result.total_faults}" if result.steps else "",
        not nav.can_retreat,
        not nav.can_advance,
        "Pause" if playing else "Play",
        not (playing or nav.can_advance),
        not playing,
    )


# ── CB1: Start simulation ───────────────────────────────────────────

@app.callback(
    *_VIEW_OUTPUTS,
    Output("input-error", "children"),
    Output("performance-graph", "figure"),
    Output("comparison", "children"),
    Output("commentary", "children", allow_duplicate=True),
    Output("commentary-poll", "disabled", allow_duplicate=True),
    Input("btn-start", "n_clicks"),
    State("page-references", "value"),
    State("frame-count", "value"),
    State("algorithm", "value"),
    State("session-id", "data"),
    prevent_initial_call=True,
)
def start_simulation(n_clicks, references_text, frame_count, algorithm, session_id):
    return _start(_get_session(session_id), references_text, frame_count, algorithm)


def _start(session: Session, references_text, frame_count, algorithm) -> tuple[Any, ...]:
    try:
        result = run_simulation(
            parse_references(references_text),
            parse_frame_count(frame_count),
            algorithm,
        )
    except PageReplacementError as exc:
        # The current timeline stays exactly as it was.
        return (no_update,) * len(_VIEW_OUTPUTS) + (str(exc), no_update, no_update, no_update, no_update)

    session.navigator.reset(result)
    session.commentary = _commentary.submit(CommentaryRequest.from_result(result))

    return _view(session) + (
        "",
        _performance_figure(result),
        _comparison_table(result),
        "Generating feedback...",
        False,
    )


# ── CB2: Navigation (prev / next / play / reset / timer tick) ──────

@app.callback(
    *_VIEW_OUTPUTS,
    Output("auto-play-interval", "interval"),
    Input("btn-prev", "n_clicks"),
    Input("btn-next", "n_clicks"),
    Input("btn-play", "n_clicks"),
    Input("btn-reset", "n_clicks"),
    Input("auto-play-interval", "n_intervals"),
    State("speed-slider", "value"),
    State("session-id", "data"),
    prevent_initial_call=True,
)
def navigate(prev_clicks, next_clicks, play_clicks, reset_clicks, ticks, speed_ms, session_id):
    return _navigate(_get_session(session_id), ctx.triggered_id, speed_ms)


def _navigate(session: Session, triggered: str | None, speed_ms) -> tuple[Any, ...]:
    nav = session.navigator

    if triggered == "btn-prev":
        nav.retreat()
    elif triggered == "btn-next":
        nav.advance()
    elif triggered == "btn-play":
        nav.toggle_play(speed_ms or config.AUTOPLAY_MS)
    elif triggered == "btn-reset":
        nav.reset()
    elif triggered == "auto-play-interval":
        session.scheduler.fire()

    interval = session.scheduler.interval_ms or speed_ms or config.AUTOPLAY_MS
    return _view(session) + (interval,)


# ── CB3: Commentary poll ────────────────────────────────────────────

@app.callback(
    Output("commentary", "children", allow_duplicate=True),
    Output("commentary-poll", "disabled", allow_duplicate=True),
    Input("commentary-poll", "n_intervals"),
    State("session-id", "data"),
    prevent_initial_call=True,
)
def poll_commentary(n_intervals, session_id):
    future = _get_session(session_id).commentary
    if future is None:
        return COMMENTARY_UNAVAILABLE, True
    if not future.done():
        return no_update, False
    return future.result(), True


# ═══════════════════════════════════════════════════════════════════════
#  Entry point
# ═══════════════════════════════════════════════════════════════════════

def main() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.run(host=config.HOST, debug=False, port=config.PORT)


if __name__ == "__main__":
    main()
