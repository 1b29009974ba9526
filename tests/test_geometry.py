from __future__ import annotations

import math

import pytest

from svgscene.errors import TransformSyntaxError
from svgscene.geometry import Affine, parse_numbers, parse_transform, parse_transform_list


def _close(point, expected):
    return all(math.isclose(a, b, abs_tol=1e-9) for a, b in zip(point, expected))


def test_translate_then_scale_keeps_translate_outermost():
    transform = parse_transform_list("translate(10,0) scale(2)")

    assert transform.apply(1, 0) == (12.0, 0.0)


def test_matrix_arguments_are_column_major():
    assert parse_transform_list("matrix(1,0,0,1,5,7)") == Affine.translation(5, 7)
    assert parse_transform_list("matrix(2 0 0 3 0 0)") == Affine.scaling(2, 3)


def test_single_argument_defaults():
    assert parse_transform_list("translate(4)").apply(0, 0) == (4.0, 0.0)
    assert parse_transform_list("scale(3)").apply(1, 1) == (3.0, 3.0)


def test_rotate_about_a_centre():
    transform = parse_transform_list("rotate(90, 10, 10)")

    assert _close(transform.apply(20, 10), (10.0, 20.0))
    assert _close(transform.apply(10, 10), (10.0, 10.0))


def test_skew_shears_by_tangent():
    assert _close(parse_transform_list("skewX(45)").apply(0, 1), (1.0, 1.0))
    assert _close(parse_transform_list("skewY(45)").apply(1, 0), (1.0, 1.0))


def test_wrong_parameter_count_contributes_identity(caplog):
    with caplog.at_level("WARNING", logger="svgscene.geometry"):
        transform = parse_transform_list("matrix(1,2,3) translate(5,5)")

    assert transform == Affine.translation(5, 5)
    assert "Bad matrix parameters" in caplog.text


def test_unknown_function_is_fatal():
    with pytest.raises(TransformSyntaxError, match="Unhandled transform"):
        parse_transform("shear", "1")


@pytest.mark.parametrize("value", ["translate(1,2", "scale(x)", "10 translate(1)"])
def test_malformed_transform_lists_are_fatal(value):
    with pytest.raises(TransformSyntaxError):
        parse_transform_list(value)


def test_empty_transform_is_identity():
    assert parse_transform_list("   ").is_identity


def test_parse_numbers_accepts_compact_forms():
    assert parse_numbers("10-5 .5.5,1e2") == [10.0, -5.0, 0.5, 0.5, 100.0]

    with pytest.raises(ValueError):
        parse_numbers("1 two")


def test_composition_applies_right_operand_first():
    move = Affine.translation(1, 0)
    double = Affine.scaling(2)

    assert (move @ double).apply(1, 0) == (3.0, 0.0)
    assert (double @ move).apply(1, 0) == (4.0, 0.0)
