import logging

import numpy as np
import streamlit as st

from display import (
    SWEEP_LABELS, TABLE_COLUMNS, characteristic_chart, clamp_input, fan_html,
    observation_table, readout, speed_chart,
)
from motor import DEFAULT_INPUTS, InvalidInputError, SimulationState, characteristic

logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")

# =======================
# PAGE CONFIG
# =======================
st.set_page_config(page_title="Shunt DC Motor Lab", layout="wide")

# =======================
# INPUT RANGES
# (name, label, min, max, step)
# =======================
INPUTS = [
    ("voltage", "Supply voltage V (V)", 0.0, 220.0, 1.0),
    ("ra_ext", "External armature resistance Ra (Ω)", 0.0, 50.0, 0.5),
    ("rf_ext", "External field resistance Rf (Ω)", 0.0, 500.0, 5.0),
]
SWEEP_POINTS = 200


# =======================
# SESSION DEFAULTS
# =======================
def _ss_set_default(key, value):
    if key not in st.session_state:
        st.session_state[key] = value


_ss_set_default("page", "Simulation")
_ss_set_default("sim", SimulationState())
_ss_set_default("history", [])
_ss_set_default("sweep", "ra_ext")
# widget keys are dropped while the Theory page is shown; restore them
# from the last snapshot rather than the defaults
for _name, *_ in INPUTS:
    _ss_set_default(_name, float(getattr(st.session_state.sim.inputs, _name)))
    _ss_set_default(f"{_name}_num", float(getattr(st.session_state.sim.inputs, _name)))


# =======================
# CALLBACKS
# =======================
def _from_slider(name):
    st.session_state[f"{name}_num"] = st.session_state[name]


def _from_number(name, lo, hi):
    val = clamp_input(st.session_state[f"{name}_num"], lo, hi)
    st.session_state[f"{name}_num"] = val
    st.session_state[name] = val


def record():
    st.session_state.history.append(st.session_state.sim.record_observation())


def reset():
    st.session_state.history = []
    st.session_state.sim.reset()
    for name, *_ in INPUTS:
        st.session_state[name] = float(getattr(DEFAULT_INPUTS, name))
        st.session_state[f"{name}_num"] = float(getattr(DEFAULT_INPUTS, name))


# =======================
# SIDEBAR PAGE SELECTOR
# =======================
with st.sidebar:
    st.selectbox("Page", ["Simulation", "Theory"], key="page")

st.title("Speed Control of a Shunt DC Motor")


# =======================
# SIMULATION PAGE
# =======================
if st.session_state.page == "Simulation":
    sim = st.session_state.sim

    with st.sidebar:
        st.header("Controls")
        for name, label, lo, hi, step in INPUTS:
            st.slider(label, min_value=lo, max_value=hi, step=step,
                      key=name, on_change=_from_slider, args=(name,))
            st.number_input(label, step=step, key=f"{name}_num",
                            label_visibility="collapsed",
                            on_change=_from_number, args=(name, lo, hi))

        c1, c2 = st.columns(2)
        c1.button("Record", type="primary", width="stretch", on_click=record)
        c2.button("Reset", width="stretch", on_click=reset)

    try:
        sim.update(**{name: float(st.session_state[name]) for name, *_ in INPUTS})
    except InvalidInputError as exc:
        st.error(str(exc))

    out = readout(sim.outputs)

    col1, col2 = st.columns([1, 2], gap="large")

    # ---- live readout ----
    with col1:
        st.markdown(fan_html(sim.outputs.rpm), unsafe_allow_html=True)
        st.metric("Speed N", f"{out['speed']} RPM")
        st.metric("Back-EMF Eb", f"{out['eb']} V")
        st.metric("Field current If", f"{out['i_f']} A")

    # ---- observations ----
    with col2:
        st.subheader("Observation Table")
        history = st.session_state.history
        if history:
            st.dataframe(observation_table(history), column_order=TABLE_COLUMNS,
                         hide_index=True, width="stretch")
            st.plotly_chart(speed_chart(history), width="stretch")
        else:
            st.info("Set the inputs and press **Record** to log a reading.")

    # ---- characteristic ----
    st.subheader("Speed Characteristic")
    param = st.radio("Sweep", list(SWEEP_LABELS), key="sweep",
                     format_func=SWEEP_LABELS.get, horizontal=True)
    lo, hi = next((lo, hi) for name, _, lo, hi, _ in INPUTS if name == param)
    xs = np.linspace(lo, hi, SWEEP_POINTS)
    speeds = characteristic(param, xs, sim.inputs, sim.constants)
    st.plotly_chart(
        characteristic_chart(param, xs, speeds,
                             current=(getattr(sim.inputs, param), sim.outputs.rpm)),
        width="stretch",
    )

# =======================
# THEORY PAGE
# =======================
else:
    c = st.session_state.sim.constants

    st.markdown("### Aim")
    st.write(
        "To study how the speed of a shunt DC motor changes with supply voltage, "
        "armature-circuit resistance and field-circuit resistance."
    )

    st.markdown("### Theory")
    st.latex(r"I_f = \frac{V}{R_{f,int} + R_{f,ext}}")
    st.latex(r"E_b = V - I_a\,(R_{a,int} + R_{a,ext})")
    st.latex(r"N = K\,\frac{E_b}{\phi} \approx K\,\frac{E_b}{I_f}")
    st.write(
        "Flux is taken proportional to field current (linear magnetic circuit) "
        "and the load current is held constant."
    )

    st.markdown("### Motor Data")
    st.write(
        f"- Internal armature resistance: **{c.Ra_int} Ω**\n"
        f"- Internal field resistance: **{c.Rf_int} Ω**\n"
        f"- Load current: **{c.Ia_load} A**\n"
        f"- Speed constant K: **{c.K}** (1500 RPM at 220 V, no external resistance)"
    )

    st.markdown("### Observations to look for")
    st.write(
        "- **Armature control**: adding Ra lowers Eb and so lowers speed (below rated).\n"
        "- **Field control**: adding Rf weakens the field and raises speed (above rated).\n"
        "- An open field circuit makes the motor run away; the simulator caps it at 6000 RPM.\n"
        "- Back-EMF never goes negative: a motor whose IR drop exceeds the supply simply stalls."
    )
