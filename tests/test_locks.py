import threading
import time

from acs.services.locks import TournamentLocks


def test_same_tournament_is_serialized() -> None:
    locks = TournamentLocks()
    active = []
    overlaps = []

    def work() -> None:
        with locks.hold(1):
            active.append(1)
            if len(active) > 1:
                overlaps.append(True)
            time.sleep(0.01)
            active.pop()

    threads = [threading.Thread(target=work) for _ in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert overlaps == []


def test_different_tournaments_do_not_block_each_other() -> None:
    locks = TournamentLocks()
    with locks.hold(1):
        acquired = threading.Event()

        def other() -> None:
            with locks.hold(2):
                acquired.set()

        thread = threading.Thread(target=other)
        thread.start()
        assert acquired.wait(timeout=2)
        thread.join()
