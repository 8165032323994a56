"""
Pytest configuration and shared fixtures for parser tests.

This module contains fixtures that are shared across multiple test modules.
"""

import textwrap

import pytest

from smfparser.parser.models import CollectedMaterial, MaterialValue

FOO_SOURCE = "Foo { var a = 3; var b = 1.5f; SetupProxies { Init { x = a; } } }"


@pytest.fixture
def foo_source():
    """Fixture providing the smallest material with a variable reference."""
    return FOO_SOURCE


@pytest.fixture
def full_source():
    """Fixture providing a material using every construct of the language."""
    return textwrap.dedent(
        """
        // comment before the material
        LightmappedGeneric {
            var basetexture = "brick/wall01";
            var alpha = 0.75f;
            var frame = -2;
            var scale = 1e3;
            var bias = 0.5d;
            var color = [1, 0.5f, 0.25f];
            var offset = [0.1, 2, 3, 4];
            var size = [640, 480];

            /* setup runs once */
            SetupProxies {
                Init { texture = basetexture; }
            }

            RenderProxies {
                Sine { resultVar = alpha; sineperiod = 8; sinemin = -1.5; }
                Scroll { rate = offset[2]; label = "scroll"; }
                Clamp { srcVar1 = color[0]; min = 0.0f; max = 1.0d; }
            }
        }
        """
    )


@pytest.fixture
def collected():
    """Fixture providing an empty collector with one variable declared."""
    info = CollectedMaterial()
    info.variables["existing"] = MaterialValue.integer(1)
    return info
