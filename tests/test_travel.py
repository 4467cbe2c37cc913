"""Tests for travel service consistency."""

from typing import List

from conftest import exterior, info, interior, npc, only, ref, run, topic
from tes3_validator.plugins.models import CELL_SIZE, Record
from tes3_validator.validators.travel import TravelValidator, get_town_name

X_POS = [100.0, 100.0, 0.0]
Y_POS = [5 * CELL_SIZE + 100.0, 5 * CELL_SIZE + 100.0, 0.0]
Z_POS = [9 * CELL_SIZE + 100.0, 100.0, 0.0]


def caravaner(record_id: str, destination: List[float], class_id: str = "Caravaner") -> Record:
    return npc(
        record_id,
        travel_destinations=[{"translation": destination, "rotation": [0, 0, 0]}],
        **{"class": class_id},
    )


def world(
    with_b: bool = True,
    b_class: str = "Caravaner",
    a_text: str = "To Ytown",
    b_destination: List[float] = X_POS,
) -> List[Record]:
    records: List[Record] = [caravaner("caravaner_a", Y_POS)]
    if with_b:
        records.append(caravaner("caravaner_b", b_destination, b_class))
    records.append(exterior((0, 0), [ref("caravaner_a", X_POS)], name="Xtown"))
    records.append(
        exterior((5, 5), [ref("caravaner_b", Y_POS)] if with_b else [], name="Ytown")
    )
    records.append(topic("Destination"))
    records.append(info("a1", speaker_id="caravaner_a", text=a_text))
    if with_b:
        records.append(info("b1", speaker_id="caravaner_b", text="To Xtown"))
    return records


class TestReturnTravel:
    """Test that every destination offers a way back."""

    def test_reciprocal_services(self, reporter) -> None:
        """Test that two caravaners serving each other produce no messages."""
        run(world(), TravelValidator(reporter))
        assert reporter.lines == []

    def test_missing_return(self, reporter) -> None:
        """Test that removing the return service reintroduces the message."""
        run(world(with_b=False), TravelValidator(reporter))
        assert only(reporter.lines, "no return travel") == [
            "Npc caravaner_a in Xtown 0,0 offers travel to Ytown 5,5 but there is no return travel there"
        ]

    def test_return_service_elsewhere(self, reporter) -> None:
        """Test that a service in the destination going somewhere else is no return."""
        run(world(b_destination=Z_POS), TravelValidator(reporter))
        assert only(reporter.lines, "caravaner_a") == [
            "Npc caravaner_a in Xtown 0,0 offers travel to Ytown 5,5 but there is no return travel there"
        ]

    def test_class_mismatch(self, reporter) -> None:
        """Test that a return service of another class is reported."""
        run(world(b_class="Shipmaster"), TravelValidator(reporter))
        assert reporter.lines == [
            "Npc caravaner_a in Xtown 0,0 offers Caravaner travel to Ytown 5,5 "
            "but there is no corresponding return travel there",
            "Npc caravaner_b in Ytown 5,5 offers Shipmaster travel to Xtown 0,0 "
            "but there is no corresponding return travel there",
        ]

    def test_interior_destination(self, reporter) -> None:
        """Test that interior destinations match by cell name."""
        records = [
            npc(
                "boatman",
                travel_destinations=[{"translation": [0, 0, 0], "cell": "Dock, Pier"}],
                **{"class": "Shipmaster"},
            ),
            npc(
                "ferry",
                travel_destinations=[{"translation": X_POS}],
                **{"class": "Shipmaster"},
            ),
            exterior((0, 0), [ref("boatman", X_POS)], name="Xtown"),
            interior("Dock, Pier", [ref("ferry", refr_index=2)]),
            topic("Destination"),
            info("1", speaker_id="boatman", text="I go to the Dock."),
            info("2", speaker_id="ferry", text="Back to Xtown."),
        ]
        run(records, TravelValidator(reporter))
        assert reporter.lines == []


class TestDestinationTopic:
    """Test the destination topic requirements."""

    def test_missing_reply(self, reporter) -> None:
        """Test that a caravaner without a destination reply is reported."""
        records = [r for r in world() if r.id != "a1"]
        run(records, TravelValidator(reporter))
        assert reporter.lines == [
            "Npc caravaner_a offers travel services but does not have a reply to the destination topic"
        ]

    def test_town_not_mentioned(self, reporter) -> None:
        """Test that each destination town must be named in the replies."""
        run(world(a_text="Anywhere you like"), TravelValidator(reporter))
        assert reporter.lines == [
            "Npc caravaner_a does not mention Ytown in their destination response"
        ]


class TestTravelClasses:
    """Test travel classes without services."""

    def test_class_without_travel(self, reporter) -> None:
        """Test that travel classes are expected to offer travel."""
        run([npc("lazy", **{"class": "T_Glb_Caravaner"})], TravelValidator(reporter))
        assert reporter.lines == [
            "Npc lazy has class T_Glb_Caravaner but does not offer travel services"
        ]

    def test_town_name(self) -> None:
        """Test that town names stop at the first comma."""
        assert get_town_name("Old Ebonheart, Docks") == "Old Ebonheart"
        assert get_town_name("Firewatch") == "Firewatch"
