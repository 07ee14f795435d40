from blinker import Namespace

_signals = Namespace()

# Sent after a successful write with ``paths``: the views whose cached data is stale.
views_invalidated = _signals.signal("views-invalidated")

ATTENDANCE_PATHS = ("/attendance", "/dashboard")
CLASSROOM_PATHS = ("/classrooms", "/dashboard")


def revalidate(*paths, **extra):
    views_invalidated.send("attendance_app", paths=tuple(paths), **extra)
