"""Property-based tests for concurrent overlay access."""

import tempfile
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from hypothesis import given, settings, strategies as st

from envoverlay.services.diagnostics import Verbosity
from envoverlay.services.overlay import OverlayManager, get_overlay_manager

QUIET = Verbosity.QUIET


class TestConcurrencyHandling:
    """Property 6: Concurrency Handling - For any interleaving of manager calls,
    the ledger and the environment never disagree."""

    @given(
        num_files=st.integers(min_value=2, max_value=5),
        num_operations=st.integers(min_value=10, max_value=40),
        seed=st.integers(min_value=0, max_value=10_000),
    )
    @settings(deadline=None, max_examples=10)
    def test_ledger_matches_environment_under_contention(self, num_files, num_operations, seed):
        environ = {"SHARED": "baseline"}
        manager = OverlayManager(environ=environ)
        errors = []

        with tempfile.TemporaryDirectory() as directory:
            paths = []
            for i in range(num_files):
                path = Path(directory) / f"{i}.env"
                path.write_text(f"SHARED=file{i}\nOWN_{i}={i}\n", encoding="utf-8")
                paths.append(str(path))

            def operation(op_id):
                try:
                    choice = (op_id * 7 + seed) % 4
                    path = paths[(op_id + seed) % num_files]
                    if choice == 0:
                        manager.load(path, QUIET)
                    elif choice == 1:
                        manager.unload(path, QUIET)
                    elif choice == 2:
                        manager.load_many(paths[op_id % num_files:], QUIET)
                    else:
                        manager.reload(path, QUIET)
                    assert all(record.source in paths for record in manager.variables().values())
                except Exception as e:
                    errors.append(e)

            with ThreadPoolExecutor(max_workers=8) as executor:
                futures = [executor.submit(operation, i) for i in range(num_operations)]
                for future in as_completed(futures, timeout=30):
                    future.result()

            assert errors == []
            for name, record in manager.variables().items():
                assert environ[name] == record.value

            manager.cleanup(QUIET)

        assert environ == {"SHARED": "baseline"}

    def test_process_wide_manager_is_created_once(self, monkeypatch):
        import envoverlay.services.overlay as overlay_module

        monkeypatch.setattr(overlay_module, "_process_manager", None)
        created = []
        original_init = OverlayManager.__init__

        def counting_init(self, *args, **kwargs):
            created.append(self)
            original_init(self, *args, **kwargs)

        monkeypatch.setattr(OverlayManager, "__init__", counting_init)

        barrier = threading.Barrier(16)
        results = []

        def first_access():
            barrier.wait()
            results.append(get_overlay_manager())

        threads = [threading.Thread(target=first_access) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(created) == 1
        assert all(result is results[0] for result in results)
