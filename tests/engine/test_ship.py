"""Tests for the ship and fleet model."""

import pytest

from broadside.engine.ship import Fleet, Position, Ship, ShipType, create_fleet, footprint


def test_create_fleet_has_every_canonical_ship_unplaced() -> None:
    fleet = create_fleet()
    assert [ship.id for ship in fleet] == list(ShipType)
    assert [ship.size for ship in fleet] == [5, 4, 3, 3, 2]
    assert [ship.name for ship in fleet] == ["Carrier", "Battleship", "Cruiser", "Submarine", "Destroyer"]
    for ship in fleet:
        assert not ship.is_placed
        assert ship.positions == ()
        assert len(ship.hits) == ship.size
        assert not any(ship.hits)


def test_ship_sunk_only_when_every_segment_hit() -> None:
    ship = Ship.of_type(ShipType.CRUISER).placed_at(footprint(3, Position(3, 3), False), False)
    for idx, pos in enumerate(ship.positions, start=1):
        ship = ship.with_hit(pos)
        assert ship.is_sunk is (idx == ship.size)


def test_with_hit_ignores_foreign_positions() -> None:
    ship = Ship.of_type(ShipType.DESTROYER).placed_at(footprint(2, Position(0, 0), True), True)
    assert ship.with_hit(Position(5, 5)) is ship


def test_hits_must_match_size() -> None:
    with pytest.raises(ValueError):
        Ship(id=ShipType.DESTROYER, name="Destroyer", size=2, hits=(False,))


def test_fleet_requires_canonical_ships() -> None:
    with pytest.raises(ValueError):
        Fleet(tuple(Ship.of_type(ShipType.DESTROYER) for _ in range(5)))


def test_position_labels_and_neighbours() -> None:
    assert Position(0, 0).label == "A1"
    assert Position(9, 9).label == "J10"
    assert Position(4, 2).label == "C5"
    assert set(Position(1, 1).orthogonal_neighbours()) == {
        Position(0, 1),
        Position(2, 1),
        Position(1, 0),
        Position(1, 2),
    }
    assert len(Position(5, 5).surrounding()) == 8


def test_fleet_lists_sunk_ships_by_name() -> None:
    fleet = create_fleet()
    assert fleet.sunk_names() == []

    destroyer = Ship.of_type(ShipType.DESTROYER).placed_at(footprint(2, Position(9, 0), True), True)
    for pos in destroyer.positions:
        destroyer = destroyer.with_hit(pos)
    assert fleet.with_ship(destroyer).sunk_names() == ["Destroyer"]
