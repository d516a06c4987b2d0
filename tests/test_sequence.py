# File: tests/test_sequence.py
import pytest

from image_scout.sequence import SplittableSequence


def collect(splitter):
    items = []
    splitter.for_each_remaining(items.append)
    return items


def test_append_and_grow():
    seq = SplittableSequence()
    assert seq.is_empty()
    for i in range(10):
        seq.append(i)
    assert seq.capacity == 10

    seq.append(10)
    assert seq.capacity == 20
    assert seq.to_list() == list(range(11))
    assert len(seq) == 11


def test_initial_capacity():
    assert SplittableSequence(capacity=25).capacity == 40
    with pytest.raises(ValueError):
        SplittableSequence(capacity=-1)


def test_get_set_and_bounds():
    seq = SplittableSequence(["a", "b", "c"])
    assert seq[1] == "b"
    assert seq.set(1, "B") == "b"
    seq[2] = "C"
    assert seq.to_list() == ["a", "B", "C"]

    for bad in (-1, 3):
        with pytest.raises(IndexError):
            seq.get(bad)
        with pytest.raises(IndexError):
            seq.remove_at(bad)


def test_remove_at_shifts_down_and_clears_slot():
    seq = SplittableSequence(["a", "b", "c", "d"])
    assert seq.remove_at(1) == "b"
    assert seq.to_list() == ["a", "c", "d"]
    assert seq._data[3] is None


def test_index_of_and_contains():
    seq = SplittableSequence(["x", "y", "x"])
    assert seq.index_of("x") == 0
    assert seq.index_of("z") == -1
    assert "y" in seq
    assert "z" not in seq


def test_iterator_remove():
    seq = SplittableSequence(range(6))
    it = iter(seq)
    for item in it:
        if item % 2:
            it.remove()
    assert seq.to_list() == [0, 2, 4]


def test_iterator_remove_requires_next():
    it = iter(SplittableSequence([1, 2]))
    with pytest.raises(RuntimeError):
        it.remove()
    next(it)
    it.remove()
    with pytest.raises(RuntimeError):
        it.remove()


def test_replace_all_and_for_each():
    seq = SplittableSequence([1, 2, 3])
    seq.replace_all(lambda x: x * 10)
    seen = []
    seq.for_each(seen.append)
    assert seen == [10, 20, 30]


def test_equality_and_extend():
    a = SplittableSequence([1, 2])
    b = SplittableSequence()
    b.extend(a)
    assert a == b
    b.append(3)
    assert a != b


def test_split_seven_gives_three_and_four():
    seq = SplittableSequence("abcdefg")
    lower = seq.splitter()
    upper = lower.split()

    assert lower.estimate_size() == 3
    assert len(upper) == 4
    assert collect(lower) + collect(upper) == list("abcdefg")


@pytest.mark.parametrize("size", [0, 1])
def test_split_too_small(size):
    assert SplittableSequence(range(size)).splitter().split() is None


def test_try_advance():
    splitter = SplittableSequence([1, 2]).splitter()
    seen = []
    assert splitter.try_advance(seen.append)
    assert splitter.try_advance(seen.append)
    assert not splitter.try_advance(seen.append)
    assert seen == [1, 2]


def test_recursive_split_covers_every_item_once():
    seq = SplittableSequence(range(37))

    def leaves(splitter):
        upper = splitter.split()
        if upper is None:
            return [splitter]
        return leaves(splitter) + leaves(upper)

    parts = leaves(seq.splitter())
    assert all(len(p) == 1 for p in parts)
    assert [item for p in parts for item in collect(p)] == list(range(37))


def test_reduce():
    splitter = SplittableSequence([1, 2, 3, 4]).splitter()
    assert splitter.reduce(lambda x: x * x, lambda a, b: a + b, 0) == 30
    assert splitter.estimate_size() == 0
