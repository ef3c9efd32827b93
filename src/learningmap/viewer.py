"""Plotly-based preview of a learner's progress on a learning map."""

from dataclasses import dataclass

import plotly.graph_objects as go

from src.learningmap.placestore import PlaceStore, place_element_id
from src.learningmap.progress import Classification, PlaceState
from src.learningmap.svgmap import Point, SvgMap

# Marker color per display state, in legend order
STATE_COLORS = {
    "Visited": "rgb(38, 162, 105)",
    "Reachable": "rgb(192, 28, 40)",
    "Waygone": "rgb(154, 153, 150)",
    "Hidden": "rgb(222, 221, 218)",
}


@dataclass
class PlaceInfo:
    """Place metadata for display."""

    id: int
    element_id: str
    position: Point
    state: str
    starting: bool
    target: bool
    activity: object = None


def _state_name(state: PlaceState) -> str:
    if state.waygone:
        return "Waygone"
    if state.visited:
        return "Visited"
    if state.reachable:
        return "Reachable"
    return "Hidden"


def extract_place_info(
    placestore: PlaceStore,
    svgmap: SvgMap,
    classification: Classification,
) -> list[PlaceInfo]:
    """
    Collect displayable data for all places with a position in the SVG.

    Args:
        placestore: Map graph
        svgmap: SVG document providing place positions
        classification: Display state of every place

    Returns:
        List of PlaceInfo, one per positioned place
    """
    infos: list[PlaceInfo] = []
    for place in placestore.places:
        element_id = place_element_id(place.id)
        position = svgmap.get_place_point(element_id)
        if position is None:
            continue
        infos.append(
            PlaceInfo(
                id=place.id,
                element_id=element_id,
                position=position,
                state=_state_name(classification.places[place.id]),
                starting=placestore.is_starting_place(place.id),
                target=placestore.is_target_place(place.id),
                activity=place.linkedActivity,
            )
        )
    return infos


def create_figure(
    placestore: PlaceStore,
    svgmap: SvgMap,
    classification: Classification,
    title: str = "Learning Map",
    show_hidden: bool = True,
) -> go.Figure:
    """
    Create an interactive 2D figure of places and paths colored by state.

    Args:
        placestore: Map graph
        svgmap: SVG document providing place positions
        classification: Result of ``classify`` for the learner
        title: Figure title
        show_hidden: Whether hidden places and paths are drawn

    Returns:
        Plotly Figure object ready for display
    """
    infos = extract_place_info(placestore, svgmap, classification)
    positions = {info.id: info.position for info in infos}

    fig = go.Figure()

    # Paths first so they're drawn below the places
    lines = []
    for path in placestore.paths:
        if path.fid not in positions or path.sid not in positions:
            continue
        if classification.paths[path.id].hidden and not show_hidden:
            continue
        lines.append((positions[path.fid], positions[path.sid]))
    _add_paths_to_figure(fig, lines)

    for state_name, color in STATE_COLORS.items():
        state_infos = [info for info in infos if info.state == state_name]
        if not state_infos or (state_name == "Hidden" and not show_hidden):
            continue
        _add_places_to_figure(fig, state_infos, color=color, name=state_name)

    fig.update_layout(
        title=title,
        xaxis=dict(range=[0, placestore.width], showgrid=False),
        # SVG y axis points down
        yaxis=dict(range=[placestore.height, 0], scaleanchor="x", showgrid=False),
        showlegend=True,
        legend=dict(yanchor="top", y=0.99, xanchor="left", x=0.01),
        margin=dict(l=0, r=0, t=80, b=0),
        updatemenus=_create_toggle_buttons(fig),
    )
    return fig


def _create_toggle_buttons(fig: go.Figure) -> list[dict]:
    """Create a dropdown showing all traces or a single state."""
    trace_names = [trace.name for trace in fig.data]
    num_traces = len(trace_names)

    buttons = [
        dict(
            label="All Visible",
            method="restyle",
            args=[{"visible": [True] * num_traces}],
        ),
    ]
    for i, name in enumerate(trace_names):
        visible = ["legendonly"] * num_traces
        visible[i] = True
        buttons.append(
            dict(
                label=f"Only {name}",
                method="restyle",
                args=[{"visible": visible}],
            )
        )

    return [
        dict(
            type="dropdown",
            direction="down",
            buttons=buttons,
            pad={"r": 10, "t": 10},
            showactive=True,
            x=0.0,
            xanchor="left",
            y=1.15,
            yanchor="top",
        )
    ]


def _add_places_to_figure(
    fig: go.Figure,
    infos: list[PlaceInfo],
    color: str,
    name: str,
    marker_size: int = 14,
) -> None:
    """Add place markers with hover information."""
    hover_texts = []
    for info in infos:
        text = f"<b>{info.element_id}</b><br>State: {info.state}<br>"
        if info.activity is not None:
            text += f"Activity: {info.activity}<br>"
        if info.starting:
            text += "Starting place<br>"
        if info.target:
            text += "Target place<br>"
        text += f"Position: ({info.position.x}, {info.position.y})"
        hover_texts.append(text)

    fig.add_trace(
        go.Scatter(
            x=[info.position.x for info in infos],
            y=[info.position.y for info in infos],
            mode="markers+text",
            marker=dict(
                size=marker_size,
                color=color,
                line=dict(width=[3 if info.target else 0 for info in infos], color="black"),
            ),
            text=[info.element_id for info in infos],
            textposition="top center",
            hovertext=hover_texts,
            hoverinfo="text",
            name=name,
        )
    )


def _add_paths_to_figure(fig: go.Figure, lines: list[tuple[Point, Point]]) -> None:
    """Add path lines to figure."""
    # None separators keep the segments disconnected
    x: list[int | None] = []
    y: list[int | None] = []
    for start, end in lines:
        x.extend([start.x, end.x, None])
        y.extend([start.y, end.y, None])

    fig.add_trace(
        go.Scatter(
            x=x,
            y=y,
            mode="lines",
            line=dict(color="rgb(150, 150, 150)", width=2),
            hoverinfo="skip",
            name="Paths",
        )
    )


def show_figure(fig: go.Figure) -> None:
    """Display figure in browser."""
    fig.show()


def export_html(fig: go.Figure, output_path: str) -> None:
    """Export figure as standalone HTML file."""
    fig.write_html(output_path, include_plotlyjs=True, full_html=True)
