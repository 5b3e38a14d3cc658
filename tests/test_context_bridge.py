"""Tests for the detection-to-expansion context bridge."""

import pytest


@pytest.fixture
def bridge():
    from dictassist.engine.context_bridge import ContextBridge
    from dictassist.engine.patterns import default_body_part_groups, default_modality_groups

    return ContextBridge(default_modality_groups(), default_body_part_groups())


def test_starts_empty(bridge):
    from dictassist.engine.context_bridge import BridgeState

    assert bridge.state is BridgeState.EMPTY
    assert bridge.latest is None
    assert bridge.body_part_context is None
    assert bridge.modality_label is None


def test_body_part_always_detected_modality_gated(bridge):
    from dictassist.engine.context_bridge import BridgeState

    snapshot = bridge.update("CT scan of the chest demonstrates clear lung fields")
    assert bridge.state is BridgeState.CLASSIFIED
    assert snapshot.body_part.label == "Chest"
    assert snapshot.modality is None
    assert bridge.body_part_context == "Chest"
    assert bridge.modality_label is None


def test_auto_detect_enables_modality(bridge):
    bridge.auto_detect = True
    bridge.update("CT scan of the chest demonstrates clear lung fields")
    assert bridge.modality_label == "CT"
    assert bridge.latest.modality.confidence == 99

    bridge.auto_detect = False
    bridge.update("CT scan of the chest demonstrates clear lung fields")
    assert bridge.modality_label is None


def test_each_update_fully_recomputes(bridge):
    bridge.update("Ultrasound of the liver and gallbladder")
    assert bridge.body_part_context == "Abdomen"

    bridge.update("Right knee effusion with meniscus tear")
    assert bridge.body_part_context == "Lower Extremity"

    bridge.update("too short")
    assert bridge.body_part_context is None
    assert bridge.latest.text == "too short"


def test_expand_uses_latest_body_part(bridge):
    from dictassist.engine.schemas import Macro

    nml = Macro(
        name="nml",
        replacement_text="within normal limits",
        is_smart_macro=True,
        context_expansions=[{"body_part": "Chest", "text": "lungs clear bilaterally"}],
    )
    bridge.update("Chest radiograph with both lungs visualised")
    assert bridge.expand("Lungs: nml", [nml]) == "Lungs: lungs clear bilaterally"

    bridge.update("Ultrasound of the pelvis and bladder")
    assert bridge.expand("Lungs: nml", [nml]) == "Lungs: within normal limits"


def test_reset_returns_to_empty(bridge):
    from dictassist.engine.context_bridge import BridgeState

    bridge.update("MRI brain without contrast")
    assert bridge.body_part_context == "Head"
    bridge.reset()
    assert bridge.state is BridgeState.EMPTY
    assert bridge.body_part_context is None
