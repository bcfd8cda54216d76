"""Shared fixtures: small in-memory trait images and layer sets."""

import io

import pytest
from PIL import Image

from nftstudio.models import Dependency, Layer, Trait


def png_bytes(color, size=(8, 8)):
    buf = io.BytesIO()
    Image.new("RGBA", size, color).save(buf, format="PNG")
    return buf.getvalue()


RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)
CLEAR = (0, 0, 0, 0)


@pytest.fixture
def scenario_layers():
    """Background A(70)/B(30), Eyes X(100)."""
    return [
        Layer(name="Background", order=0, traits=[
            Trait("A.png", png_bytes(RED), 70),
            Trait("B.png", png_bytes(GREEN), 30),
        ]),
        Layer(name="Eyes", order=1, traits=[
            Trait("X.png", png_bytes(CLEAR), 100),
        ]),
    ]


@pytest.fixture
def dependent_layers():
    """
    Body: Robot / Human. Head: Antenna requires Robot, Hair requires Human.
    Only two combinations are reachable.
    """
    return [
        Layer(name="Body", order=0, traits=[
            Trait("Robot.png", png_bytes(BLUE), 50),
            Trait("Human.png", png_bytes(GREEN), 50),
        ]),
        Layer(name="Head", order=1, traits=[
            Trait("Antenna.png", png_bytes(RED), 50, [Dependency(0, 0)]),
            Trait("Hair.png", png_bytes(CLEAR), 50, [Dependency(0, 1)]),
        ]),
    ]


@pytest.fixture
def wide_layers():
    """Three layers of four traits each, no dependencies (64 combinations)."""
    colors = [RED, GREEN, BLUE, CLEAR]
    return [
        Layer(name=name, order=i, traits=[
            Trait(f"{name}{j}.png", png_bytes(c), 25) for j, c in enumerate(colors)
        ])
        for i, name in enumerate(["Background", "Body", "Eyes"])
    ]
