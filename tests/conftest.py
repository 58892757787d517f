"""Pytest configuration and BRD fixtures for brdrender tests."""
import pytest

from brdrender import RenderOptions
from brdrender.brd import BrdDocument

BRD_TEMPLATE = """<?xml version="1.0" encoding="utf-8"?>
<eagle version="7.2.0">
<drawing>
<board>
<plain>
{plain}
</plain>
<libraries>
{libraries}
</libraries>
<designrules name="test">
{designrules}
</designrules>
<elements>
{elements}
</elements>
<signals>
{signals}
</signals>
</board>
</drawing>
</eagle>
"""

# 20 x 10 mm board outline on the Dimension layer
RECT_OUTLINE = """
<wire x1="0" y1="0" x2="20" y2="0" width="0" layer="20"/>
<wire x1="20" y1="0" x2="20" y2="10" width="0" layer="20"/>
<wire x1="20" y1="10" x2="0" y2="10" width="0" layer="20"/>
<wire x1="0" y1="10" x2="0" y2="0" width="0" layer="20"/>
"""

PAD_LIBRARY = """
<library name="test">
<packages>
<package name="TH1">
<pad name="1" x="0" y="0" drill="0.8"/>
</package>
<package name="SILK">
<wire x1="-1" y1="-1" x2="1" y2="-1" width="0.2" layer="21"/>
<smd name="1" x="0" y="0" dx="1" dy="1" layer="1"/>
<text x="0" y="1" size="1.778" layer="25">&gt;NAME</text>
</package>
</packages>
</library>
"""


def design_rules_xml(**params: str) -> str:
    """Render <param> nodes."""
    return "\n".join(f'<param name="{name}" value="{value}"/>' for name, value in params.items())


def make_brd(
    plain: str = RECT_OUTLINE,
    extra_plain: str = "",
    libraries: str = "",
    elements: str = "",
    signals: str = "",
    designrules: str | None = None,
    **rules: str,
) -> str:
    """
    Build a BRD XML string.

    Keyword arguments become design rule params; `designrules` replaces
    the whole block body.
    """
    if designrules is None:
        params = {"layerSetup": "1", "mtCopper": "0.035mm", "mtIsolate": "1.5mm"}
        params.update(rules)
        designrules = design_rules_xml(**params)
    return BRD_TEMPLATE.format(
        plain=plain + extra_plain,
        libraries=libraries,
        designrules=designrules,
        elements=elements,
        signals=signals,
    )


@pytest.fixture
def brd_factory():
    """Callable building BRD XML strings."""
    return make_brd


@pytest.fixture
def options():
    """20 pixels per millimetre keeps test rasters small."""
    return RenderOptions(pixel_microns=50)


@pytest.fixture
def pad_board_xml():
    """Rectangle board with one through-hole pad placed at its center."""
    return make_brd(
        libraries=PAD_LIBRARY,
        elements='<element name="J1" library="test" package="TH1" value="CONN" x="10" y="5"/>',
    )


@pytest.fixture
def silk_board_xml():
    """Board with one top-side and one mirrored SILK element."""
    return make_brd(
        libraries=PAD_LIBRARY,
        elements=(
            '<element name="U1" library="test" package="SILK" value="TOP" x="5" y="5"/>\n'
            '<element name="U2" library="test" package="SILK" value="BOT" x="15" y="5" rot="MR0"/>'
        ),
    )


@pytest.fixture
def pad_document(pad_board_xml):
    return BrdDocument.from_string(pad_board_xml)
