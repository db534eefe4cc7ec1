"""Tests for the Streamlit page wiring in app.py."""

import pytest
from streamlit.testing.v1 import AppTest

from motor import DEFAULT_INPUTS, SimulationInputs


def _button(at, label):
    return next(b for b in at.button if b.label == label)


@pytest.fixture
def at():
    app = AppTest.from_file("../app.py", default_timeout=30)
    app.run()
    assert not app.exception
    return app


def test_starts_at_rated_point(at):
    sim = at.session_state["sim"]
    assert sim.inputs == DEFAULT_INPUTS
    assert sim.outputs.rpm == 1500
    assert at.session_state["history"] == []


def test_slider_drives_state_and_number_box(at):
    at.slider(key="voltage").set_value(150.0).run()
    assert not at.exception
    assert at.session_state["sim"].inputs.voltage == 150.0
    assert at.number_input(key="voltage_num").value == 150.0


def test_number_box_is_clamped(at):
    at.number_input(key="ra_ext_num").set_value(80.0).run()
    assert not at.exception
    assert at.session_state["ra_ext_num"] == 50.0
    assert at.slider(key="ra_ext").value == 50.0
    assert at.session_state["sim"].inputs.ra_ext == 50.0


def test_record_appends_row(at):
    at.slider(key="voltage").set_value(150.0).run()
    _button(at, "Record").click().run()
    assert not at.exception
    history = at.session_state["history"]
    assert [r.n for r in history] == [1]
    assert history[0].inputs.voltage == 150.0
    assert len(at.dataframe) == 1


def test_reset_clears_history_and_inputs(at):
    at.slider(key="voltage").set_value(150.0).run()
    _button(at, "Record").click().run()
    _button(at, "Record").click().run()
    _button(at, "Reset").click().run()
    assert not at.exception
    sim = at.session_state["sim"]
    assert at.session_state["history"] == []
    assert sim.count == 0
    assert sim.inputs == SimulationInputs(220.0, 0.0, 0.0)
    assert at.slider(key="voltage").value == 220.0
    assert len(at.dataframe) == 0


def test_inputs_survive_theory_page(at):
    at.slider(key="voltage").set_value(150.0).run()
    at.slider(key="rf_ext").set_value(100.0).run()
    _button(at, "Record").click().run()

    at.selectbox(key="page").set_value("Theory").run()
    assert not at.exception
    at.selectbox(key="page").set_value("Simulation").run()
    assert not at.exception

    sim = at.session_state["sim"]
    assert sim.inputs == SimulationInputs(150.0, 0.0, 100.0)
    assert at.slider(key="voltage").value == 150.0
    assert at.number_input(key="rf_ext_num").value == 100.0

    _button(at, "Record").click().run()
    assert [r.inputs.voltage for r in at.session_state["history"]] == [150.0, 150.0]
