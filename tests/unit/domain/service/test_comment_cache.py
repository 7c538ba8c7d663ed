"""Unit tests for CommentCache."""

from reel.domain.model.comment import Reaction
from reel.domain.service import CommentCache
from reel.domain.value import ReactionType
from tests.conftest import BOB, make_comment, make_page


def loaded_cache(*comments, total=None, limit=50) -> CommentCache:
    cache = CommentCache()
    cache.replace_page("v1", make_page(list(comments), limit=limit, total=total))
    return cache


class TestPages:
    """Tests for page replacement and appending."""

    def test_replace_page_sets_video_comments_and_pagination(self):
        cache = loaded_cache(make_comment("c1"), make_comment("c2"), total=2)

        assert cache.video_id == "v1"
        assert [c.id for c in cache.comments] == ["c1", "c2"]
        assert cache.pagination.total == 2

    def test_append_page_skips_comments_already_present(self):
        """A comment delivered by push before its page arrives is not duplicated."""
        # Arrange
        cache = loaded_cache(make_comment("c1"), total=3, limit=1)
        cache.insert(make_comment("c3"))

        # Act
        appended = cache.append_page(
            make_page([make_comment("c2"), make_comment("c3")], page=2, limit=1, total=4)
        )

        # Assert
        assert appended == 1
        assert [c.id for c in cache.comments] == ["c1", "c3", "c2"]
        assert cache.pagination.page == 2

    def test_reset_clears_everything(self):
        cache = loaded_cache(make_comment("c1"))

        cache.reset("v2")

        assert cache.video_id == "v2"
        assert cache.comments == []
        assert cache.pagination is None

    def test_comments_is_a_copy(self):
        cache = loaded_cache(make_comment("c1"))

        cache.comments.clear()

        assert len(cache.comments) == 1


class TestInsert:
    """Tests for idempotent insertion."""

    def test_top_level_is_appended_and_total_bumped(self):
        cache = loaded_cache(make_comment("c1"), total=1)

        assert cache.insert(make_comment("c2")) is True

        assert [c.id for c in cache.comments] == ["c1", "c2"]
        assert cache.pagination.total == 2

    def test_insert_is_idempotent(self):
        cache = loaded_cache(make_comment("c1"), total=1)
        comment = make_comment("c2")

        cache.insert(comment)
        assert cache.insert(comment) is False

        assert [c.id for c in cache.comments] == ["c1", "c2"]
        assert cache.pagination.total == 2

    def test_reply_goes_under_its_parent(self):
        cache = loaded_cache(make_comment("c1"), make_comment("c2"), total=2)

        cache.insert(make_comment("r1", parent_id="c1", author=BOB))

        assert [c.id for c in cache.comments] == ["c1", "c2"]
        assert [r.id for r in cache.find("c1").replies] == ["r1"]
        assert cache.pagination.total == 2

    def test_reply_to_unloaded_parent_is_dropped(self):
        cache = loaded_cache(make_comment("c1"))

        assert cache.insert(make_comment("r1", parent_id="missing")) is False
        assert not cache.contains("r1")

    def test_comment_for_another_video_is_ignored(self):
        cache = loaded_cache(make_comment("c1"))

        assert cache.insert(make_comment("x1", video_id="v2")) is False
        assert not cache.contains("x1")

    def test_insert_into_unbound_cache_is_ignored(self):
        cache = CommentCache()

        assert cache.insert(make_comment("c1")) is False


class TestReplace:
    """Tests for in-place replacement."""

    def test_replace_keeps_position(self):
        cache = loaded_cache(make_comment("c1"), make_comment("c2"), make_comment("c3"))

        cache.replace(make_comment("c2", content="Edited", is_edited=True))

        assert [c.id for c in cache.comments] == ["c1", "c2", "c3"]
        assert cache.find("c2").content == "Edited"
        assert cache.find("c2").is_edited

    def test_replace_without_replies_keeps_cached_replies(self):
        cache = loaded_cache(make_comment("c1"))
        cache.insert(make_comment("r1", parent_id="c1"))

        cache.replace(make_comment("c1", content="Edited"))

        assert [r.id for r in cache.find("c1").replies] == ["r1"]

    def test_replace_reply_in_place(self):
        cache = loaded_cache(make_comment("c1"))
        cache.insert(make_comment("r1", parent_id="c1"))
        cache.insert(make_comment("r2", parent_id="c1"))

        cache.replace(make_comment("r1", parent_id="c1", content="Edited reply"))

        replies = cache.find("c1").replies
        assert [r.id for r in replies] == ["r1", "r2"]
        assert replies[0].content == "Edited reply"

    def test_replace_unknown_comment_is_noop(self):
        cache = loaded_cache(make_comment("c1"))

        assert cache.replace(make_comment("zz")) is False
        assert [c.id for c in cache.comments] == ["c1"]


class TestRemove:
    """Tests for removal."""

    def test_remove_top_level_drops_replies_and_decrements_total(self):
        cache = loaded_cache(make_comment("c1"), make_comment("c2"), total=2)
        cache.insert(make_comment("r1", parent_id="c1"))

        assert cache.remove("c1") is True

        assert [c.id for c in cache.comments] == ["c2"]
        assert not cache.contains("r1")
        assert cache.pagination.total == 1

    def test_remove_reply(self):
        cache = loaded_cache(make_comment("c1"), total=1)
        cache.insert(make_comment("r1", parent_id="c1"))

        cache.remove("r1")

        assert cache.find("c1").replies == []
        assert cache.pagination.total == 1

    def test_remove_absent_is_noop(self):
        cache = loaded_cache(make_comment("c1"), total=1)

        assert cache.remove("c9") is False
        assert cache.pagination.total == 1


class TestReactionsAndListeners:
    """Tests for reaction overwrite and change notification."""

    def test_apply_reactions_overwrites(self):
        cache = loaded_cache(make_comment("c1"))
        cache.insert(make_comment("r1", parent_id="c1"))
        reactions = [Reaction(user_id="u-bob", type=ReactionType.HEART)]

        assert cache.apply_reactions("r1", reactions) is True

        assert cache.find("r1").reactions == reactions

    def test_apply_reactions_to_unknown_comment(self):
        cache = loaded_cache(make_comment("c1"))

        assert cache.apply_reactions("zz", []) is False

    def test_listener_called_on_change_and_unsubscribe(self):
        cache = loaded_cache(make_comment("c1"))
        calls = []
        unsubscribe = cache.subscribe(lambda: calls.append(1))

        cache.insert(make_comment("c2"))
        cache.insert(make_comment("c2"))
        unsubscribe()
        cache.remove("c2")

        assert calls == [1]

    def test_failing_listener_does_not_break_mutation(self):
        cache = loaded_cache(make_comment("c1"))

        def boom():
            raise RuntimeError("listener bug")

        cache.subscribe(boom)
        cache.insert(make_comment("c2"))

        assert cache.contains("c2")
