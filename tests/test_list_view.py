from rvplanner.domain.models import Destination, FilterState, Folder, Visited
from rvplanner.render.list_view import ACTIONS, render_folder_sidebar, render_list


def test_cards_carry_tags_info_and_the_action_table():
    d = Destination(
        id="d1",
        name="Yellowstone",
        state="Wyoming",
        type="national-park",
        region="rocky-mountains",
        rv_camping=True,
        best_season="Summer",
        folder="f1",
        visit=Visited(date="July 2025", notes="Saw Old Faithful"),
    )
    view = render_list([d], folders=[Folder(id="f1", name="West")])
    assert view.empty is False
    card = view.cards[0]
    # Tags use display labels, and the folder id is resolved to its name.
    assert card.tags == ["National Park", "Rocky Mountains", "Visited"]
    assert [(row.label, row.value) for row in card.info] == [("RV Camping", "Available"), ("Best Season", "Summer")]
    assert card.visit_summary == "Visited July 2025: Saw Old Faithful"
    assert card.folder_name == "West"
    # A visited card offers "Mark as Wishlist" as its toggle.
    assert tuple(a.name for a in card.actions) == ACTIONS
    assert card.actions[0].label == "Mark as Wishlist"
    assert all(a.destination_id == "d1" for a in card.actions)


def test_empty_state_message_depends_on_filters():
    # An empty collection invites adding; an empty search names the search term.
    assert render_list([]).empty_message == "Start adding places you want to visit!"
    view = render_list([], filters=FilterState(search="zion"))
    assert view.empty is True
    assert "zion" in view.empty_message


def test_render_is_a_full_replacement():
    # Nothing from the previous render carries over.
    first = render_list([Destination(id="a", name="A"), Destination(id="b", name="B")])
    second = render_list([Destination(id="b", name="B")])
    assert [c.id for c in first.cards] == ["a", "b"]
    assert [c.id for c in second.cards] == ["b"]


def test_sidebar_counts_pseudo_and_user_folders():
    records = [
        Destination(id="a", name="A", folder="f1"),
        Destination(id="b", name="B", visit=Visited()),
        Destination(id="c", name="C", folder="f1", visit=Visited()),
    ]
    rows = render_folder_sidebar(records, [Folder(id="f1", name="Trip"), Folder(id="f2", name="Empty")], active="f1")
    # Pseudo-folders come first; an empty user folder still shows with 0.
    assert [(r.id, r.count) for r in rows] == [("all", 3), ("wishlist", 1), ("visited", 2), ("f1", 2), ("f2", 0)]
    assert [r.id for r in rows if r.active] == ["f1"]
    assert [r.builtin for r in rows] == [True, True, True, False, False]
