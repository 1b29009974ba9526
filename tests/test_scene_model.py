from __future__ import annotations

from svgscene.geometry import Affine
from svgscene.scene_model import Gradient, LinearGradient, Stop


def test_plain_gradient_bake_clears_transform():
    gradient = Gradient(transform=Affine.translation(3, 4))

    gradient.bake_transform()

    assert gradient.transform is None


def test_inherit_stops_uses_the_given_own_stops():
    first = Stop(offset=0.25)
    derived = LinearGradient(id="d", href="base")

    assert derived.inherit_stops({"base": [first]})
    assert derived.stops == [first]


def test_inherit_stops_reports_missing_reference():
    derived = LinearGradient(id="d", href="gone")

    assert not derived.inherit_stops({})
    assert derived.stops == []


def test_gradient_with_own_stops_ignores_href():
    own = Stop(offset=1.0)
    gradient = LinearGradient(stops=[own], href="base")

    assert gradient.inherit_stops({"base": [Stop()]})
    assert gradient.stops == [own]
