"""Property-based tests for overlay reversibility and precedence."""

import tempfile
from pathlib import Path

from hypothesis import given, settings, strategies as st

from envoverlay.services.diagnostics import Verbosity
from envoverlay.services.overlay import OverlayManager

QUIET = Verbosity.QUIET

names = st.from_regex(r"[A-Z][A-Z0-9_]{0,7}", fullmatch=True)
values = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789_-./:", max_size=12)
assignments = st.dictionaries(names, values, min_size=1, max_size=8)
baselines = st.dictionaries(names, values, max_size=8)


def _write(directory: str, name: str, variables: dict[str, str]) -> str:
    path = Path(directory) / name
    path.write_text("".join(f"{key}={value}\n" for key, value in variables.items()), encoding="utf-8")
    return str(path)


class TestReversibility:
    """Property 1: Reversibility - For any file and any baseline,
    load followed by unload leaves the environment exactly as it was."""

    @given(baseline=baselines, variables=assignments)
    @settings(deadline=None)
    def test_load_then_unload_restores_environment(self, baseline, variables):
        environ = dict(baseline)
        manager = OverlayManager(environ=environ)

        with tempfile.TemporaryDirectory() as directory:
            path = _write(directory, "a.env", variables)
            manager.load(path, QUIET)

            for key, value in variables.items():
                assert environ[key] == value
                assert manager.get_variable_source(key) == path

            manager.unload(path, QUIET)

        assert environ == baseline
        assert manager.variable_count() == 0

    @given(baseline=baselines, first=assignments, second=assignments)
    @settings(deadline=None)
    def test_cleanup_after_batch_restores_environment(self, baseline, first, second):
        environ = dict(baseline)
        manager = OverlayManager(environ=environ)

        with tempfile.TemporaryDirectory() as directory:
            manager.load_many([_write(directory, "1.env", first), _write(directory, "2.env", second)], QUIET)
            manager.cleanup(QUIET)

        assert environ == baseline


class TestIdempotence:
    """Property 2: Idempotence - Loading an unchanged file again changes nothing."""

    @given(baseline=baselines, variables=assignments)
    @settings(deadline=None)
    def test_repeated_load_yields_same_table(self, baseline, variables):
        environ = dict(baseline)
        manager = OverlayManager(environ=environ)

        with tempfile.TemporaryDirectory() as directory:
            path = _write(directory, "a.env", variables)
            manager.load(path, QUIET)
            env_after_first = dict(environ)
            records_after_first = manager.variables()

            manager.load(path, QUIET)

        assert environ == env_after_first
        assert manager.variables() == records_after_first


class TestPrecedence:
    """Property 3: Precedence - The first listed file owns every name it defines."""

    @given(first=assignments, second=assignments)
    @settings(deadline=None)
    def test_first_listed_wins(self, first, second):
        environ: dict[str, str] = {}
        manager = OverlayManager(environ=environ)

        with tempfile.TemporaryDirectory() as directory:
            f1 = _write(directory, "1.env", first)
            f2 = _write(directory, "2.env", second)
            manager.load_many([f1, f2], QUIET)

        for key in set(first) | set(second):
            expected_source = f1 if key in first else f2
            expected_value = first[key] if key in first else second[key]
            assert manager.get_variable_source(key) == expected_source
            assert environ[key] == expected_value

    @given(first=assignments, second=assignments)
    @settings(deadline=None)
    def test_each_name_has_one_owner(self, first, second):
        manager = OverlayManager(environ={})

        with tempfile.TemporaryDirectory() as directory:
            f1 = _write(directory, "1.env", first)
            f2 = _write(directory, "2.env", second)
            manager.load_many([f1, f2], QUIET)

        owned = list(manager.variables_from(f1)) + list(manager.variables_from(f2))
        assert len(owned) == len(set(owned)) == manager.variable_count()


class TestNonClobber:
    """Property 4: Non-clobber - Values changed outside the overlay survive unload."""

    @given(baseline=baselines, variables=assignments, data=st.data())
    @settings(deadline=None)
    def test_external_changes_survive_unload(self, baseline, variables, data):
        environ = dict(baseline)
        manager = OverlayManager(environ=environ)
        changed = data.draw(st.sets(st.sampled_from(sorted(variables))))

        with tempfile.TemporaryDirectory() as directory:
            path = _write(directory, "a.env", variables)
            manager.load(path, QUIET)
            for key in changed:
                environ[key] = variables[key] + "#external"
            manager.unload(path, QUIET)

        for key in variables:
            if key in changed:
                assert environ[key] == variables[key] + "#external"
            elif key in baseline:
                assert environ[key] == baseline[key]
            else:
                assert key not in environ


class TestSupersession:
    """Property 5: Batch supersession - Dropping a file from the list releases its names."""

    @given(baseline=baselines, first=assignments, second=assignments)
    @settings(deadline=None)
    def test_dropping_a_file_releases_unique_names(self, baseline, first, second):
        environ = dict(baseline)
        manager = OverlayManager(environ=environ)

        with tempfile.TemporaryDirectory() as directory:
            f1 = _write(directory, "1.env", first)
            f2 = _write(directory, "2.env", second)
            manager.load_many([f1, f2], QUIET)
            manager.load_many([f2], QUIET)

        for key in set(first) - set(second):
            if key in baseline:
                assert environ[key] == baseline[key]
            else:
                assert key not in environ
        for key, value in second.items():
            assert environ[key] == value
            assert manager.get_variable_source(key) == f2
