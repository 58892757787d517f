"""Tests for layer stack construction."""
import pytest

from brdrender.brd import DesignRules, build_layer_stack, tokenize_layer_setup
from brdrender.brd.stack import clean_layer_setup
from brdrender.config import MASK_THICKNESS_MM, PASTE_THICKNESS_MM

SCALE = 20.0


def test_clean_layer_setup_strips_blind_vias():
    assert clean_layer_setup("[2:1+((2*3)+(14*15))+16:15]") == "1+2*3+14*15+16"


def test_tokenize_simple():
    assert tokenize_layer_setup("(1*16)") == [1, "*", 16]


def test_tokenize_multilayer():
    assert tokenize_layer_setup("[2:1+((2*3)+(14*15))+16:15]") == [
        1, "+", 2, "*", 3, "+", 14, "*", 15, "+", 16,
    ]


def test_two_layer_stack_thickness():
    rules = DesignRules({
        "layerSetup": "1*16",
        "mtCopper": "0.035mm 0.035mm",
        "mtIsolate": "1.5mm",
    })
    stack = build_layer_stack(rules, SCALE)

    inner = [layer for layer in stack.layers if layer.has_tag("Copper") or layer.has_tag("Isolate")]
    assert [layer.name for layer in inner] == ["Layer1", "Layer1Core", "Layer16"]
    assert sum(layer.thickness for layer in inner) == pytest.approx((0.035 + 1.5 + 0.035) * SCALE)


def test_stack_order_and_tags():
    rules = DesignRules({"layerSetup": "1+16", "mtCopper": "0.035mm", "mtIsolate": "0.2mm"})
    stack = build_layer_stack(rules, SCALE)
    names = [layer.name for layer in stack.layers]

    assert names == [
        "Top Solderpaste", "Top Mask", "Layer1", "Layer1Prepreg", "Layer16",
        "Bottom Mask", "Bottom Solderpaste", "Bounds",
    ]
    assert stack.get("Layer1").has_tag("Top")
    assert stack.get("Layer16").has_tag("Bottom")
    assert stack.get("Layer1Prepreg").tags[:2] == ["Prepreg", "Isolate"]
    assert stack.get("Layer1Prepreg").brd_layers == (1,)


def test_bounds_layer_is_aid_only():
    stack = build_layer_stack(DesignRules({"layerSetup": "1"}), SCALE)
    bounds = stack.get("Bounds")

    assert bounds.thickness == 1.0
    assert bounds.visible is False
    assert bounds.brd_layers == (20,)


def test_thickness_includes_mask_and_paste():
    rules = DesignRules({"layerSetup": "1", "mtCopper": "0.035mm"})
    stack = build_layer_stack(rules, SCALE)

    expected = (2 * PASTE_THICKNESS_MM + 2 * MASK_THICKNESS_MM + 0.035) * SCALE
    assert stack.thickness == pytest.approx(expected)


def test_heights_accumulate():
    rules = DesignRules({"layerSetup": "1*16", "mtCopper": "0.035mm", "mtIsolate": "1.5mm"})
    stack = build_layer_stack(rules, SCALE)

    physical = stack.layers[:-1]
    for above, below in zip(physical, physical[1:]):
        assert below.height == pytest.approx(above.height + above.thickness)
    assert stack.get("Bounds").height == pytest.approx(stack.thickness)


def test_thickness_override_in_mm():
    stack = build_layer_stack(DesignRules({"layerSetup": "1*16"}), SCALE, thickness_override=1.6)
    assert stack.thickness == pytest.approx(1.6 * SCALE)


def test_short_thickness_list_reuses_last(caplog):
    rules = DesignRules({"layerSetup": "1*2*15*16", "mtCopper": "0.035mm 0.07mm", "mtIsolate": "1mm"})
    stack = build_layer_stack(rules, SCALE)

    assert stack.get("Layer16").thickness == pytest.approx(0.07 * SCALE)
    assert stack.get("Layer15Core").thickness == pytest.approx(1.0 * SCALE)
    assert "mtCopper" in caplog.text


def test_tagged_lookup():
    stack = build_layer_stack(DesignRules({"layerSetup": "1*16"}), SCALE)
    assert [layer.name for layer in stack.tagged("Mask", "Top")] == ["Top Mask"]
    assert len(stack.tagged("Copper")) == 2
