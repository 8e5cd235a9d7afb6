import os
import shutil

from reviewtui.core.bus import Bus
from reviewtui.core.events import App

HAS_GIT = shutil.which("git") is not None


def drain(bus: Bus):
    """Everything currently queued on ``bus``, App envelopes unwrapped."""
    out = []
    while True:
        ev = bus.try_next()
        if ev is None:
            return out
        out.append(ev.event if isinstance(ev, App) else ev)


def of_type(items, cls):
    return [e for e in items if isinstance(e, cls)]


def commit_file(repo, rel_path: str, content: str, message: str):
    path = os.path.join(repo.working_tree_dir, rel_path)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
    repo.index.add([rel_path])
    return repo.index.commit(message)
