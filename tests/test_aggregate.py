"""Tests for stance grouping."""
from topicboard.pipeline.aggregate import aggregate
from topicboard.pipeline.models import Stance, StanceGroup, Viewpoint


def vp(vid, stance):
    return Viewpoint(id=vid, text=vid, stance=stance)


class TestAggregate:

    def test_stable_partition(self):
        v1, v2, v3 = vp("v1", Stance.FOR), vp("v2", Stance.AGAINST), vp("v3", Stance.FOR)
        v4, v5 = vp("v4", Stance.MIXED), vp("v5", Stance.UNRECOGNIZED)

        buckets = aggregate([v1, v2, v3, v4, v5])

        assert buckets.displayed() == (
            StanceGroup(Stance.FOR, (v1, v3)),
            StanceGroup(Stance.AGAINST, (v2,)),
            StanceGroup(Stance.MIXED, (v4,)),
        )
        assert buckets.unrecognized == (v5,)
        displayed_members = [m for g in buckets.displayed() for m in g.members]
        assert v5 not in displayed_members

    def test_empty_groups_omitted_from_display(self):
        v1 = vp("v1", Stance.AGAINST)

        buckets = aggregate([v1])

        assert [g.stance for g in buckets.displayed()] == [Stance.AGAINST]
        # Still inspectable
        assert [g.stance for g in buckets.groups] == [Stance.FOR, Stance.AGAINST, Stance.MIXED]
        assert buckets.group(Stance.FOR).members == ()

    def test_display_order_independent_of_input(self):
        buckets = aggregate([vp("m", Stance.MIXED), vp("a", Stance.AGAINST), vp("f", Stance.FOR)])
        assert [g.stance for g in buckets.displayed()] == [Stance.FOR, Stance.AGAINST, Stance.MIXED]

    def test_no_viewpoints(self):
        buckets = aggregate([])
        assert buckets.displayed() == ()
        assert buckets.unrecognized == ()

    def test_group_lookup_for_unrecognized(self):
        v = vp("v", Stance.UNRECOGNIZED)
        assert aggregate([v]).group(Stance.UNRECOGNIZED).members == (v,)
