import pytest

from lwparam.exceptions import InvalidStateError
from lwparam.future import Future, completed_future


class TestFuture:
    def setup_method(self):
        self.future = Future()

    def test_new_future_is_pending(self):
        assert not self.future.done()
        assert self.future.exception() is None

    def test_set_result_makes_value_available(self):
        self.future.set_result([1, 2])

        assert self.future.done()
        assert self.future.result() == [1, 2]
        assert self.future.result() == [1, 2]

    def test_set_exception_is_raised_by_result(self):
        error = ValueError("bad")
        self.future.set_exception(error)

        assert self.future.exception() is error
        with pytest.raises(ValueError, match="bad"):
            self.future.result()

    def test_second_set_result_raises_InvalidStateError(self):
        self.future.set_result(1)

        with pytest.raises(InvalidStateError):
            self.future.set_result(2)
        with pytest.raises(InvalidStateError):
            self.future.set_exception(ValueError())

        assert self.future.result() == 1

    def test_result_times_out_while_pending(self):
        with pytest.raises(TimeoutError):
            self.future.result(timeout=0.01)

    def test_done_callbacks_run_once_on_completion(self):
        seen = []
        self.future.add_done_callback(lambda f: seen.append(f.result()))
        self.future.add_done_callback(lambda f: seen.append(f.result() * 10))

        assert seen == []
        self.future.set_result(3)

        assert seen == [3, 30]

    def test_callback_added_after_completion_runs_immediately(self):
        self.future.set_result("x")
        seen = []

        self.future.add_done_callback(seen.append)

        assert seen == [self.future]

    def test_raising_callback_is_logged_and_others_still_run(self, caplog):
        seen = []

        def broken(_future):
            raise RuntimeError("callback failed")

        self.future.add_done_callback(broken)
        self.future.add_done_callback(seen.append)
        self.future.set_result(None)

        assert seen == [self.future]
        assert "callback failed" in caplog.text


def test_completed_future_is_done():
    future = completed_future([])

    assert future.done()
    assert future.result() == []
