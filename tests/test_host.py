"""Tests for the suite/test tree and the scheduler."""

import asyncio

from qunit_ui.host import Scheduler, Suite, Test, accepts_argument


def test_create_attaches_child_suite():
    root = Suite()
    child = Suite.create(root, "Array")
    grandchild = Suite.create(child, "#length")

    assert root.suites == [child]
    assert grandchild.parent is child
    assert grandchild.path() == ["Array", "#length"]
    assert grandchild.full_title() == "Array #length"
    assert root.full_title() == ""


def test_test_full_title_includes_suites():
    root = Suite()
    suite = Suite.create(root, "Array")
    test = suite.add_test(Test("has length", lambda: None))

    assert test.full_title() == "Array has length"
    assert root.total() == 1


def test_accepts_argument():
    assert accepts_argument(lambda done: None)
    assert accepts_argument(lambda *args: None)
    assert not accepts_argument(lambda: None)
    assert not accepts_argument(lambda *, key=None: None)


def test_test_is_async_when_fn_takes_done():
    assert Test("a", lambda done: None).is_async
    assert not Test("b", lambda: None).is_async


def test_emit_calls_listeners_in_order():
    root = Suite()
    calls = []
    root.on("pre-require", lambda ns, path: calls.append(("first", path)))
    root.on("pre-require", lambda ns, path: calls.append(("second", path)))

    root.emit("pre-require", {}, "spec.py")

    assert calls == [("first", "spec.py"), ("second", "spec.py")]


def test_scheduler_reports_pass_and_fail():
    root = Suite()
    suite = Suite.create(root, "math")
    suite.add_test(Test("adds", lambda: None))

    def fails():
        raise AssertionError("1 != 2")

    suite.add_test(Test("fails", fails))

    results = Scheduler().run(root)

    assert [r.title for r in results] == ["adds", "fails"]
    assert results[0].passed
    assert not results[1].passed
    assert results[1].error == "1 != 2"
    assert results[1].suite_path == ["math"]
    assert results[1].full_title == "math fails"


def test_scheduler_names_unexpected_errors():
    root = Suite()

    def broken():
        raise KeyError("missing")

    root.add_test(Test("broken", broken))

    results = Scheduler().run(root)

    assert results[0].error == "KeyError: 'missing'"


def test_hooks_run_in_order():
    calls = []
    root = Suite()
    outer = Suite.create(root, "outer")
    inner = Suite.create(outer, "inner")
    outer.before_all(lambda: calls.append("outer before all"))
    outer.before_each(lambda: calls.append("outer before each"))
    inner.before_each(lambda: calls.append("inner before each"))
    inner.after_each(lambda: calls.append("inner after each"))
    outer.after_each(lambda: calls.append("outer after each"))
    outer.after_all(lambda: calls.append("outer after all"))
    inner.add_test(Test("t", lambda: calls.append("test")))

    Scheduler().run(root)

    assert calls == [
        "outer before all",
        "outer before each",
        "inner before each",
        "test",
        "inner after each",
        "outer after each",
        "outer after all",
    ]


def test_failing_before_each_fails_the_test():
    root = Suite()
    suite = Suite.create(root, "s")
    ran = []

    def bad_hook():
        raise RuntimeError("no fixture")

    suite.before_each(bad_hook)
    suite.add_test(Test("t", lambda: ran.append(True)))

    results = Scheduler().run(root)

    assert ran == []
    assert not results[0].passed
    assert results[0].error == '"before each" hook: RuntimeError: no fixture'


def test_async_test_waits_for_done():
    root = Suite()
    order = []

    def later(done):
        loop = asyncio.get_running_loop()
        loop.call_later(0.01, lambda: (order.append("callback"), done()))

    root.add_test(Test("later", later))
    root.add_test(Test("next", lambda: order.append("next")))

    results = Scheduler().run(root)

    assert all(r.passed for r in results)
    assert order == ["callback", "next"]


def test_async_test_fails_with_done_error():
    root = Suite()
    root.add_test(Test("t", lambda done: done(AssertionError("async failure"))))

    results = Scheduler().run(root)

    assert results[0].error == "async failure"


def test_async_test_times_out():
    root = Suite()
    root.add_test(Test("never", lambda done: None))

    results = Scheduler(timeout_ms=20).run(root)

    assert not results[0].passed
    assert "Timeout of 20ms exceeded" in results[0].error


def test_done_called_twice_is_ignored():
    root = Suite()

    def twice(done):
        done()
        done(AssertionError("too late"))

    root.add_test(Test("twice", twice))

    results = Scheduler().run(root)

    assert results[0].passed


def test_on_result_is_called_per_test():
    root = Suite()
    root.add_test(Test("a", lambda: None))
    root.add_test(Test("b", lambda: None))
    seen = []

    Scheduler(on_result=lambda r: seen.append(r.title)).run(root)

    assert seen == ["a", "b"]
