import pytest

from featureflow.types import Context, T


class _Key:
    pass


def test_background_has_no_values():
    ctx = Context.background()
    assert ctx.value("anything") is None


def test_with_value_and_lookup():
    key = _Key
    ctx = Context.background().with_value(key, [1, 2])
    assert ctx.value(key) == [1, 2]


def test_with_value_does_not_mutate_parent():
    parent = Context.background().with_value("k", "old")
    child = parent.with_value("k", "new")
    assert child.value("k") == "new"
    assert parent.value("k") == "old"


def test_lookup_walks_the_chain():
    ctx = Context.background().with_value("a", 1).with_value("b", 2)
    assert ctx.value("a") == 1
    assert ctx.value("b") == 2
    assert ctx.value("c") is None


def test_none_key_rejected():
    with pytest.raises(ValueError):
        Context.background().with_value(None, 1)


def test_run_passing_subtest():
    t = T("top")
    seen = []
    assert t.run("sub", lambda st: seen.append(st.name)) is True
    assert seen == ["top/sub"]
    assert t.failed is False


def test_error_fails_but_continues():
    t = T("top")
    reached = []

    def body(st):
        st.error("bad")
        reached.append(True)

    assert t.run("sub", body) is False
    assert reached == [True]
    assert t.failed is True
    assert t.subtests[0].messages == ["bad"]


def test_fatal_stops_subtest():
    t = T("top")
    reached = []

    def body(st):
        st.fatal("stop")
        reached.append(True)

    assert t.run("sub", body) is False
    assert reached == []
    assert t.failed is True


def test_skip_stops_without_failing():
    t = T("top")
    reached = []

    def body(st):
        st.skip("later")
        reached.append(True)

    assert t.run("sub", body) is True
    assert reached == []
    assert t.subtests[0].skipped is True
    assert t.failed is False


def test_fatal_outside_run_raises():
    t = T("top")
    with pytest.raises(AssertionError):
        t.fatal("boom")
    assert t.failed is True


def test_log_records_messages():
    t = T("top")
    t.log("one")
    t.log("two")
    assert t.messages == ["one", "two"]
    assert t.failed is False