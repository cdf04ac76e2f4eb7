"""Shared fixtures for the slab layout and quantity tests."""
import itertools

import pytest
from pylaje.models.entities import (
    JoistAxis, Point, ProjectSnapshot, RectangleShape, ReinforcementConfig, SlabConfig,
    SlabType, SteelType,
)
from pylaje.controllers.slab_controller import SlabController


@pytest.fixture
def h8_config():
    """H8 ceramic, 30x20 filler, 12 cm joist: inter-eixo 42 cm."""
    return SlabConfig.from_dimensions(slab_type=SlabType.H8)


@pytest.fixture
def h8_config_with_steel():
    return SlabConfig.from_dimensions(
        slab_type=SlabType.H8,
        reinforcement=(ReinforcementConfig(quantity=2, steel_type=SteelType.CA60, diameter="4.2", anchorage=10),),
    )


@pytest.fixture
def rect_4x3(h8_config):
    """4 m x 3 m slab, joists running along y (3 m), distributed along x (4 m)."""
    slab = RectangleShape.from_corners("s1", Point(0, 0), Point(4, 3), label="L1")
    return RectangleShape(
        id=slab.id, points=slab.points, label=slab.label, slab_config=h8_config,
        joist_axis=JoistAxis(Point(0, 0), Point(0, 1)),
    )


@pytest.fixture
def controller():
    """Controller with deterministic ids (id1, id2, ...)."""
    counter = itertools.count(1)
    return SlabController(id_factory=lambda: f"id{next(counter)}")


@pytest.fixture
def empty_snapshot():
    return ProjectSnapshot()
