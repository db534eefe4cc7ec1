"""Formatting and chart helpers for the Streamlit page."""
import plotly.graph_objects as go

from motor import ObservationRecord, SimulationOutputs

ACCENT = "#3b82f6"
IDLE = "#94a3b8"

TABLE_COLUMNS = ["#", "V", "Ra_ext (Ω)", "Rf_ext (Ω)", "If (A)", "Eb (V)", "N (RPM)"]

SWEEP_LABELS = {
    "voltage": "Supply voltage (V)",
    "ra_ext": "External armature resistance (Ω)",
    "rf_ext": "External field resistance (Ω)",
}


def clamp_input(value, lo, hi):
    if value > hi:
        return hi
    if value < lo:
        return lo
    return value


def fan_period(rpm, min_period=0.02):
    """Seconds per fan revolution, or None when the motor is (nearly) stopped."""
    if rpm <= 10:
        return None
    return max(60.0 / rpm, min_period)


def readout(outputs: SimulationOutputs):
    return {
        "speed": f"{outputs.rpm}",
        "eb": f"{outputs.eb:.2f}",
        "i_f": f"{outputs.i_f:.3f}",
    }


def fmt_number(x):
    # integers print bare, the way they were typed
    return f"{x:g}" if float(x).is_integer() else f"{x}"


def observation_row(rec: ObservationRecord):
    i, o = rec.inputs, rec.outputs
    return {
        "#": rec.n,
        "V": fmt_number(i.voltage),
        "Ra_ext (Ω)": f"{i.ra_ext:.1f}",
        "Rf_ext (Ω)": f"{i.rf_ext:.1f}",
        "If (A)": f"{o.i_f:.3f}",
        "Eb (V)": f"{o.eb:.1f}",
        "N (RPM)": o.rpm,
    }


def observation_table(records):
    return [observation_row(r) for r in records]


def speed_chart(records, height=320):
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=[r.n for r in records],
        y=[r.outputs.rpm for r in records],
        mode="lines+markers",
        name="Speed (RPM)",
        line=dict(color=ACCENT, width=2, shape="spline", smoothing=0.3),
        marker=dict(color="#06b6d4", size=8),
        fill="tozeroy",
        fillcolor="rgba(59, 130, 246, 0.1)",
    ))
    fig.update_layout(
        title="Recorded Speed",
        xaxis_title="Reading",
        yaxis_title="RPM",
        yaxis=dict(rangemode="tozero"),
        showlegend=False,
        height=height,
    )
    return fig


def characteristic_chart(param, values, speeds, current=None, height=320):
    """
    Theoretical speed over a sweep of `param`.
    `current` is an (x, rpm) pair marking the present operating point.
    """
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=list(values), y=list(speeds),
        mode="lines",
        name="Model",
        line=dict(color=ACCENT),
    ))
    if current is not None:
        fig.add_trace(go.Scatter(
            x=[current[0]], y=[current[1]],
            mode="markers",
            name="Operating point",
            marker=dict(color="#ef4444", size=10),
        ))
    fig.update_layout(
        title=f"Speed vs {SWEEP_LABELS[param]}",
        xaxis_title=SWEEP_LABELS[param],
        yaxis_title="RPM",
        height=height,
    )
    return fig


def fan_html(rpm):
    period = fan_period(rpm)
    if period is None:
        style = f"color:{IDLE};"
    else:
        style = f"color:{ACCENT};animation:spin {period:.3f}s linear infinite;"
    return (
        "<style>@keyframes spin{from{transform:rotate(0deg)}to{transform:rotate(360deg)}}</style>"
        f'<div style="font-size:96px;text-align:center;line-height:1;">'
        f'<span style="display:inline-block;{style}">&#10059;</span></div>'
    )
