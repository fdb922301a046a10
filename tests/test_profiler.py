from srccov import (CountProfiler, LambdaProfiler, ValueProfiler, SourceRange,
    get_profiler, get_all_profilers)


def count(name):
    profiler = get_profiler(name, None)
    return profiler.value if profiler else 0


def test_profilers_are_registered_by_name():
    p = CountProfiler("test_counter")
    assert CountProfiler("test_counter") is p
    assert get_profiler("test_counter") is p
    assert ("test_counter", p) in get_all_profilers()


def test_count_profiler():
    before = count("test_increments")
    CountProfiler("test_increments")(3)
    CountProfiler("test_increments")(2)
    assert count("test_increments") == before + 5


def test_value_profilers():
    ValueProfiler("test_value")("ready")
    assert get_profiler("test_value").value == "ready"
    LambdaProfiler("test_lambda")(lambda: 41 + 1)
    assert str(get_profiler("test_lambda")) == "42"


def test_count_profiler_format():
    assert CountProfiler._format(12) == "12.0"
    assert CountProfiler._format(1500) == "1.5K"
    assert CountProfiler._format(2_500_000) == "2.5M"


def test_store_counts_events_and_snapshots(store):
    events, sources, snapshots = (count("events"), count("sources"),
        count("snapshots"))
    store.add_loaded_statement(SourceRange("p.py", 1, 1))
    store.add_covered_statement(SourceRange("p.py", 1, 1))
    store.add_loaded_root(SourceRange("q.py", 1, 4))
    store.snapshot()

    assert count("events") == events + 3
    assert count("sources") == sources + 2
    assert count("snapshots") == snapshots + 1
