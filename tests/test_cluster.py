"""
Tests for the cluster accumulator.
"""

import logging

import pytest

from pointstack.spatial.cluster import Cluster, lookup_attribute
from pointstack.spatial.geometry import Coordinate, Envelope
from pointstack.spatial.positions import PositionStrategy


def _add_all(cluster, points, attributes=None, **kwargs):
    for i, (x, y) in enumerate(points, start=1):
        attrs = attributes[i - 1] if attributes else {}
        cluster.add(Coordinate(x, y), f"f.{i}", attrs, **kwargs)
    return cluster


# ==============================================================================
# Attribute Lookup
# ==============================================================================

class TestLookupAttribute:
    """Test attribute name matching."""

    def test_exact_match_wins(self):
        attrs = {"Name": "upper", "name": "lower"}
        assert lookup_attribute(attrs, "name") == "lower"

    def test_case_insensitive_fallback(self):
        assert lookup_attribute({"attribute b": "II"}, "Attribute B") == "II"

    def test_missing(self):
        assert lookup_attribute({"a": 1}, "b") is None


# ==============================================================================
# Accumulation
# ==============================================================================

class TestClusterAccumulation:
    """Test counts, members and bounding box."""

    def test_empty_cluster(self):
        cluster = Cluster("k", Coordinate(0, 0))
        assert cluster.count == 0
        assert cluster.count_unique == 0
        assert cluster.bounding_box is None
        assert cluster.location is None

    def test_counts(self):
        cluster = _add_all(Cluster("k", Coordinate(0, 0)), [(1, 1), (1, 1), (2, 2)])
        assert cluster.count == 3
        assert cluster.count_unique == 2
        assert cluster.count_unique <= cluster.count

    def test_members_in_arrival_order(self):
        cluster = _add_all(Cluster("k", Coordinate(0, 0)), [(3, 3), (1, 1), (2, 2)])
        assert cluster.member_ids == ["f.1", "f.2", "f.3"]
        assert cluster.member_coordinates == [Coordinate(3, 3), Coordinate(1, 1), Coordinate(2, 2)]

    def test_bounding_box_includes_first_member(self):
        cluster = _add_all(Cluster("k", Coordinate(0, 0)), [(1, 5), (3, 2)])
        assert cluster.bounding_box == Envelope(1, 2, 3, 5)

    def test_single_member_bounding_box_is_degenerate(self):
        cluster = _add_all(Cluster("k", Coordinate(0, 0)), [(4, 4)])
        assert cluster.bounding_box == Envelope(4, 4, 4, 4)

    def test_original_location(self):
        superimposed = _add_all(Cluster("k", Coordinate(0, 0)), [(6.5, 6.5), (6.5, 6.5)])
        assert superimposed.original_location == Coordinate(6.5, 6.5)

        spread = _add_all(Cluster("k", Coordinate(0, 0)), [(8, 8), (8.3, 8.3)])
        assert spread.original_location is None

    def test_singleton_attributes(self):
        cluster = Cluster("k", Coordinate(0, 0))
        cluster.add(Coordinate(1, 1), "f.1", {"name": "first"})
        assert cluster.singleton_attributes == {"name": "first"}

        cluster.add(Coordinate(2, 2), "f.2", {"name": "second"})
        assert cluster.singleton_attributes == {}

    def test_repr(self):
        cluster = _add_all(Cluster((1, 2), Coordinate(0, 0)), [(1, 1)])
        assert "count=1" in repr(cluster)


# ==============================================================================
# Location Resolution
# ==============================================================================

class TestClusterLocation:
    """Test location resolution per strategy."""

    def test_nearest(self):
        cluster = _add_all(
            Cluster((8, 8), Coordinate(8.5, 8.5), PositionStrategy.NEAREST),
            [(8, 8), (8.3, 8.3)],
        )
        assert cluster.location.x == pytest.approx(8.4)
        assert cluster.location.y == pytest.approx(8.4)

    def test_weighted(self):
        cluster = _add_all(
            Cluster("k", Coordinate(0, 0), PositionStrategy.WEIGHTED),
            [(4, 4), (4.1, 4.1), (4.1, 4.1)],
        )
        assert cluster.location.x == pytest.approx(4.075)

    def test_average(self):
        cluster = _add_all(
            Cluster("II", Coordinate(6.5, 6.5), PositionStrategy.AVERAGE),
            [(6.5, 6.5), (8, 8)],
        )
        assert cluster.location == Coordinate(7.25, 7.25)

    def test_extent(self):
        cluster = _add_all(
            Cluster("II", Coordinate(6, 4), PositionStrategy.EXTENT),
            [(6, 4), (8, 8), (7.5, 5)],
        )
        assert cluster.location == Coordinate(7, 6)

    @pytest.mark.parametrize("strategy", list(PositionStrategy))
    def test_location_frozen_after_first_read(self, strategy):
        """Members added after the first read do not move the location."""
        cluster = _add_all(Cluster("k", Coordinate(0, 0), strategy), [(1, 1), (3, 3)])
        first = cluster.location
        assert cluster.is_resolved

        cluster.add(Coordinate(100, 100), "late", {})
        assert cluster.location == first
        assert cluster.count == 3


# ==============================================================================
# Sort Values and Requested Attributes
# ==============================================================================

class TestSortValue:
    """Test the sort value of single and stacked clusters."""

    def test_no_sort_field(self):
        """Without a sort field a single member has no sort value, but a
        stacked cluster still takes the clustered value."""
        cluster = Cluster("k", Coordinate(0, 0))
        cluster.add(Coordinate(1, 1), "f.1", {"c": "1"})
        assert cluster.sort_value is None

        cluster.add(Coordinate(2, 2), "f.2", {"c": "2"})
        assert cluster.sort_value == "0"

    def test_no_sort_field_custom_clustered_value(self):
        cluster = _add_all(
            Cluster("k", Coordinate(0.5, 0.5)), [(0.1, 0.1), (0.2, 0.2)],
            clustered_sort_value="999",
        )
        assert cluster.sort_value == "999"

    def test_single_member_uses_own_value(self):
        cluster = _add_all(
            Cluster("k", Coordinate(0, 0)), [(1, 1)], [{"attribute c": 5}],
            sort_field="attribute c",
        )
        assert cluster.sort_value == "5"

    def test_stacked_uses_clustered_value(self):
        cluster = _add_all(
            Cluster("k", Coordinate(0, 0)),
            [(1, 1), (1, 1), (1, 1)],
            [{"c": "3"}, {"c": "3"}, {"c": "7"}],
            sort_field="c",
            clustered_sort_value="999",
        )
        assert cluster.sort_value == "999"

    def test_missing_sort_value_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="pointstack.spatial.cluster"):
            cluster = _add_all(Cluster("k", Coordinate(0, 0)), [(1, 1)], [{}], sort_field="c")
        assert cluster.sort_value is None
        assert "sort field 'c'" in caplog.text


class TestRequestedAttributes:
    """Test per-member collection of requested attributes."""

    def test_values_in_member_order(self):
        cluster = _add_all(
            Cluster("k", Coordinate(0, 0)),
            [(1, 1), (2, 2)],
            [{"Attribute A": 2.4}, {"attribute a": "1"}],
            requested_attributes=["attribute a"],
        )
        assert cluster.requested_attribute_values == {"attribute a": ["2.4", "1"]}

    def test_missing_value_is_omitted_and_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="pointstack.spatial.cluster"):
            cluster = _add_all(
                Cluster("k", Coordinate(0, 0)),
                [(1, 1), (2, 2)],
                [{"a": "x"}, {}],
                requested_attributes=["a"],
            )
        assert cluster.requested_attribute_values["a"] == ["x"]
        assert "no value for attribute 'a'" in caplog.text
