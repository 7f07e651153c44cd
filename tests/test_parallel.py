"""Producer/consumer stage runner tests."""

import threading

import pytest

from statfem.assembly.parallel import partition, run_stage


class TestPartition:

    def test_covers_range(self):
        ranges = partition(10, 3)
        assert ranges == [(0, 3), (3, 6), (6, 10)]

    def test_single_part(self):
        assert partition(7, 1) == [(0, 7)]

    def test_as_many_parts_as_items(self):
        assert partition(3, 3) == [(0, 1), (1, 2), (2, 3)]


class TestRunStage:

    @pytest.mark.parametrize("threads", [1, 2, 4, 16])
    def test_every_item_consumed_once(self, threads):
        seen = []
        run_stage("squares", 50, threads, lambda i: i * i,
                  lambda i, m: seen.append((i, m)), verbose=False)
        assert sorted(seen) == [(i, i * i) for i in range(50)]

    def test_consumer_runs_in_one_thread(self):
        consumers = set()

        def consume(i, message):
            consumers.add(threading.get_ident())

        run_stage("threads", 40, 4, lambda i: i, consume, verbose=False)
        assert len(consumers) == 1
        assert threading.get_ident() not in consumers

    def test_order_within_one_producer(self):
        seen = []
        run_stage("order", 20, 1, lambda i: i, lambda i, m: seen.append(i), verbose=False)
        assert seen == list(range(20))

    def test_empty_stage(self):
        calls = []
        run_stage("empty", 0, 4, calls.append, lambda i, m: calls.append(m), verbose=False)
        assert calls == []

    def test_producer_error_propagates(self):
        seen = []

        def produce(i):
            if i == 13:
                raise ValueError("bad item 13")
            return i

        with pytest.raises(ValueError, match="bad item 13"):
            run_stage("fails", 100, 3, produce, lambda i, m: seen.append(i), verbose=False)
        assert 13 not in seen

    def test_consumer_error_propagates(self):
        def consume(i, message):
            if i == 5:
                raise KeyError("consumer failed")

        with pytest.raises(KeyError, match="consumer failed"):
            run_stage("fails", 200, 4, lambda i: i, consume, verbose=False)

    def test_progress_bar(self, capsys):
        run_stage("Visible stage", 5, 2, lambda i: i, lambda i, m: None, verbose=True)
        assert "Visible stage" in capsys.readouterr().err
